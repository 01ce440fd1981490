"""
In-memory model of the jobs and lines of a user's crontab
"""

import logging

import cronsync.utils.user
from cronsync.exceptions import ValidationError
from cronsync.fields import FIELDS, SCHEDULE_FIELDS, FieldValue, normalize_field

log = logging.getLogger(__name__)


def _breaks_line(value):
    return "\n" in value or "\r" in value


class ForeignLine(str):
    """
    A line of a crontab which is not a managed job: comments, blank lines,
    environment settings. Kept verbatim.
    """

    __slots__ = ()

    def __repr__(self):
        return f"<ForeignLine {str.__repr__(self)}>"


class CronEntry:
    """
    One managed cron job.

    Every field has two values: the one found in the crontab (``is``) and the
    declared one (``should``). The declared value wins when rendering.
    """

    def __init__(self, name, user, uid=None, autonamed=False):
        self.name = name
        self.user = user
        self.uid = uid
        self.autonamed = autonamed
        self._is = {}
        self._should = {}

    @classmethod
    def declare(cls, name, user, command=None, resolver=None, **fields):
        """
        Build an entry from declared values, validating them.

        ``resolver`` maps a user name to its uid and raises
        :class:`~cronsync.exceptions.UserLookupError` for unknown users. Pass
        ``False`` to skip the lookup.
        """
        if not name:
            raise ValidationError("A cron job needs a name")
        if _breaks_line(str(name)):
            raise ValidationError(f"Invalid cron job name {name!r}")
        if not user:
            raise ValidationError(f"You must specify the cron user of {name}")
        unknown = set(fields) - set(SCHEDULE_FIELDS)
        if unknown:
            raise ValidationError(
                "Invalid field(s) for cron job {}: {}".format(
                    name, ", ".join(sorted(unknown))
                )
            )
        uid = None
        if resolver is None:
            resolver = cronsync.utils.user.resolve
        if resolver:
            uid = resolver(user)

        entry = cls(str(name), user, uid=uid)
        if command is not None:
            entry.should("command", command)
        for kind in SCHEDULE_FIELDS:
            if fields.get(kind) is not None:
                entry.should(kind, fields[kind])
        return entry

    @property
    def command(self):
        return self.get("command")

    def observe(self, kind, value):
        """
        Record the value found in the crontab for ``kind``
        """
        self._is[kind] = self._coerce(kind, value)

    def should(self, kind, value):
        """
        Record the declared value for ``kind``
        """
        self._should[kind] = self._coerce(kind, value)

    def _coerce(self, kind, value):
        if kind == "command":
            if value is None or not str(value).strip() or _breaks_line(str(value)):
                raise ValidationError(
                    f"The command of {self.name} must be a single non-empty line"
                )
            return str(value)
        if isinstance(value, FieldValue):
            return value
        return normalize_field(value, kind)

    def declared(self):
        """
        Return the declared values, by field
        """
        return dict(self._should)

    def observed(self):
        """
        Return the values found in the crontab, by field
        """
        return dict(self._is)

    def get(self, kind):
        """
        Return the value to render for ``kind``: declared, else observed
        """
        if kind in self._should:
            return self._should[kind]
        if kind in self._is:
            return self._is[kind]
        if kind == "command":
            return None
        return FieldValue.UNCONSTRAINED

    def overlay(self, other):
        """
        Copy the declared values of ``other`` onto this entry
        """
        for kind, value in other.declared().items():
            self._should[kind] = value
        if other.uid is not None:
            self.uid = other.uid

    def __repr__(self):
        return f"<CronEntry {self.user}:{self.name}>"


def entry_from_mapping(decl, resolver=None):
    """
    Build a declared :class:`CronEntry` from a mapping such as
    ``{"name": "backup", "user": "root", "command": "...", "hour": 2}``.
    Keys which are not job fields are rejected.
    """
    decl = dict(decl)
    try:
        name = decl.pop("name")
        user = decl.pop("user")
    except KeyError as exc:
        raise ValidationError(f"Declared cron job is missing {exc.args[0]!r}") from exc
    unknown = set(decl) - set(FIELDS)
    if unknown:
        raise ValidationError(
            "Invalid field(s) for cron job {}: {}".format(
                name, ", ".join(sorted(unknown))
            )
        )
    command = decl.pop("command", None)
    return CronEntry.declare(name, user, command=command, resolver=resolver, **decl)
