"""
Read, write and remove a user's crontab.

Every store exposes the same three calls:

``read()``
    Returns ``(text, exists)``. A user without a crontab is not an error,
    ``exists`` is then ``False``.

``write(text)``
    Replaces the whole crontab.

``remove()``
    Deletes the crontab.

Failures raise :class:`~cronsync.exceptions.StoreError`.
"""

import logging
import os
import platform
import shlex
import subprocess
import tempfile

import cronsync.utils.user
from cronsync.exceptions import StoreError

log = logging.getLogger(__name__)

# Some crontab implementations prepend this, with two more lines, to `crontab -l`
CRONTAB_BANNER = "# DO NOT EDIT THIS FILE - edit the master and reinstall."


def _run_all(cmd, runas=None):
    """
    Run ``cmd``, a list of arguments, and return a dict holding its pid,
    retcode, stdout and stderr
    """
    if runas:
        # Load the user's environment, crontab is looked up in its PATH
        cmd = ["su", "-", runas, "-c", " ".join(shlex.quote(arg) for arg in cmd)]
        log.debug("Executing command %s as user %s", cmd[-1], runas)
    else:
        log.debug("Executing command %s", " ".join(cmd))

    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as exc:
        raise StoreError(f"Unable to run '{cmd[0]}': {exc}") from exc

    out, err = proc.communicate()
    ret = {
        "pid": proc.pid,
        "retcode": proc.returncode,
        "stdout": out,
        "stderr": err,
    }
    log.trace("Command %s returned %s", cmd[0], ret["retcode"])
    return ret


def _strip_banner(text):
    lines = text.split("\n")
    if lines[0].startswith(CRONTAB_BANNER):
        del lines[0:3]
    return "\n".join(lines)


class TableStore:
    """
    Base class of the crontab stores of one user
    """

    def __init__(self, user):
        self.user = user

    def read(self):
        raise NotImplementedError

    def write(self, text):
        raise NotImplementedError

    def remove(self):
        raise NotImplementedError

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.user}>"


class CrontabStore(TableStore):
    """
    Manage the crontab through the ``crontab`` binary. When running as root
    for another user, ``-u <user>`` is passed.
    """

    def __init__(self, user, crontab_cmd="crontab"):
        super().__init__(user)
        self.crontab_cmd = crontab_cmd

    def _cmd(self, *args):
        # If we run as the requested user, no user switch is needed
        if cronsync.utils.user.check_uid_match(self.user):
            return [self.crontab_cmd] + list(args)
        return [self.crontab_cmd, "-u", self.user] + list(args)

    def _run(self, *args):
        return _run_all(self._cmd(*args))

    def read(self):
        ret = self._run("-l")
        if ret["retcode"]:
            # crontab exits non-zero when the user has no crontab
            log.debug("No crontab for %s: %s", self.user, ret["stderr"].strip())
            return "", False
        return _strip_banner(ret["stdout"]), True

    def _write_file(self, text):
        fd_, path = tempfile.mkstemp(prefix="cronsync-")
        with os.fdopen(fd_, "w", encoding="utf-8") as fp_:
            fp_.write(text)
        os.chmod(path, 0o600)
        return path

    def write(self, text):
        path = self._write_file(text)
        try:
            ret = self._run(path)
        finally:
            os.remove(path)
        if ret["retcode"]:
            raise StoreError(
                f"Failed to write the crontab of {self.user}",
                info={"retcode": ret["retcode"], "stderr": ret["stderr"].strip()},
            )

    def remove(self):
        ret = self._run("-r")
        if ret["retcode"]:
            if "no crontab" in ret["stderr"].lower():
                log.debug("No crontab to remove for %s", self.user)
                return
            raise StoreError(
                f"Failed to remove the crontab of {self.user}",
                info={"retcode": ret["retcode"], "stderr": ret["stderr"].strip()},
            )


class SunCrontabStore(CrontabStore):
    """
    Solaris and AIX do not support specifying the user to ``crontab``, the
    commands are run as that user instead.
    """

    def _run(self, *args):
        return _run_all([self.crontab_cmd] + list(args), runas=self.user)

    def _write_file(self, text):
        path = super()._write_file(text)
        if os.geteuid() == 0:
            # The file is read by crontab running as the user
            os.chown(path, cronsync.utils.user.resolve(self.user), -1)
        return path


class FileStore(TableStore):
    """
    Keep the crontab of each user in a plain file named after the user,
    within ``tab_dir``
    """

    def __init__(self, user, tab_dir):
        super().__init__(user)
        self.path = os.path.join(tab_dir, user)

    def read(self):
        try:
            with open(self.path, encoding="utf-8") as fp_:
                return fp_.read(), True
        except FileNotFoundError:
            return "", False
        except (OSError, UnicodeDecodeError) as exc:
            raise StoreError(f"Failed to read {self.path}: {exc}") from exc

    def write(self, text):
        tab_dir = os.path.dirname(self.path)
        try:
            os.makedirs(tab_dir, exist_ok=True)
            fd_, tmp = tempfile.mkstemp(dir=tab_dir, prefix=".cronsync-")
            with os.fdopen(fd_, "w", encoding="utf-8") as fp_:
                fp_.write(text)
            os.chmod(tmp, 0o600)
            os.replace(tmp, self.path)
        except OSError as exc:
            raise StoreError(f"Failed to write {self.path}: {exc}") from exc

    def remove(self):
        try:
            os.remove(self.path)
        except FileNotFoundError:
            log.debug("No crontab to remove at %s", self.path)
        except OSError as exc:
            raise StoreError(f"Failed to remove {self.path}: {exc}") from exc


def get_store(user, opts):
    """
    Return the store of ``user`` for the configured ``tab_backend``
    """
    backend = opts.get("tab_backend", "auto")
    if backend == "auto":
        if platform.system() in ("SunOS", "AIX"):
            backend = "suntab"
        else:
            backend = "crontab"

    if backend == "file":
        return FileStore(user, opts["tab_dir"])
    crontab_cmd = opts.get("crontab_cmd", "crontab")
    if backend == "suntab":
        return SunCrontabStore(user, crontab_cmd=crontab_cmd)
    if backend == "crontab":
        return CrontabStore(user, crontab_cmd=crontab_cmd)
    raise StoreError(f"Unknown crontab backend '{backend}'")
