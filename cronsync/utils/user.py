"""
Functions for querying and modifying a user account and the groups to which it
belongs.
"""

import logging
import os

from cronsync.exceptions import UserLookupError

try:
    import pwd

    HAS_PWD = True
except ImportError:
    HAS_PWD = False

log = logging.getLogger(__name__)


def get_uid(user=None):
    """
    Get the uid for a given user name. If no user given, the current euid will
    be returned. If the user does not exist, None will be returned.
    """
    if not HAS_PWD:
        return None
    elif user is None:
        try:
            return os.geteuid()
        except AttributeError:
            return None
    else:
        try:
            return pwd.getpwnam(user).pw_uid
        except KeyError:
            return None


def resolve(user):
    """
    Return the uid of ``user``, raising :class:`UserLookupError` when the user
    is not known to the system.
    """
    if isinstance(user, int):
        return user
    uid = get_uid(user)
    if uid is None:
        raise UserLookupError(f"User {user} not found")
    log.trace("Resolved user %s to uid %s", user, uid)
    return uid


def check_uid_match(user):
    """
    Returns true if the running process' uid matches the uid of ``user``
    """
    if not HAS_PWD:
        return False
    return os.geteuid() == get_uid(user)
