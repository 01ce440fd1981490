"""
Validate and canonicalize the five crontab schedule fields.

Every value is turned into a decimal string within the bounds of its field.
Month and weekday names are accepted, either in full or as their first three
letters, case insensitively:

.. code-block:: python

    >>> normalize("mon", "weekday")
    '1'
    >>> normalize_field("0,30", "minute").render()
    '0,30'
"""

import collections
import logging
import re

from cronsync.exceptions import ValidationError

log = logging.getLogger(__name__)

UNCONSTRAINED = "*"

_DIGITS_RE = re.compile(r"[0-9]+")

FieldSpec = collections.namedtuple("FieldSpec", ("name", "lower", "upper", "names"))

# The order in which the schedule fields appear on a crontab line
SCHEDULE_FIELDS = ("minute", "hour", "monthday", "month", "weekday")

# All the fields of a crontab line, the command being the last one
FIELDS = SCHEDULE_FIELDS + ("command",)

FIELD_SPECS = {
    "minute": FieldSpec("minute", 0, 59, None),
    "hour": FieldSpec("hour", 0, 23, None),
    "monthday": FieldSpec("monthday", 1, 31, None),
    # index is the month number, there is no month 0
    "month": FieldSpec(
        "month",
        1,
        12,
        (
            None,
            "january",
            "february",
            "march",
            "april",
            "may",
            "june",
            "july",
            "august",
            "september",
            "october",
            "november",
            "december",
        ),
    ),
    "weekday": FieldSpec(
        "weekday",
        0,
        6,
        (
            "sunday",
            "monday",
            "tuesday",
            "wednesday",
            "thursday",
            "friday",
            "saturday",
        ),
    ),
}


def _alpha_index(value, names):
    """
    Return the index of ``value`` in ``names`` or None. Three letter values
    match the first name containing them, anything else must be the full name.
    """
    value = value.lower()
    if len(value) == 3:
        for index, name in enumerate(names):
            if name and value in name:
                return index
    else:
        for index, name in enumerate(names):
            if name is not None and name == value:
                return index
    return None


def normalize(value, kind):
    """
    Return the canonical token for a single ``value`` of the field ``kind``.

    Fields without a FieldSpec, i.e. the command, are returned untouched.
    """
    spec = FIELD_SPECS.get(kind)
    if spec is None:
        return value

    value = str(value)
    num = None
    if _DIGITS_RE.fullmatch(value):
        num = int(value)
    elif spec.names:
        num = _alpha_index(value, spec.names)

    if num is None or not spec.lower <= num <= spec.upper:
        raise ValidationError(f"{value} is not a valid {kind}")
    return str(num)


class FieldValue:
    """
    The value of a schedule field: either unconstrained, rendered as ``*``,
    or an ordered, non-empty list of canonical tokens.
    """

    __slots__ = ("tokens",)

    def __init__(self, tokens=()):
        self.tokens = tuple(tokens)

    @property
    def unconstrained(self):
        return not self.tokens

    def render(self):
        if self.unconstrained:
            return UNCONSTRAINED
        return ",".join(self.tokens)

    def __eq__(self, other):
        if not isinstance(other, FieldValue):
            return NotImplemented
        return self.tokens == other.tokens

    def __hash__(self):
        return hash(self.tokens)

    def __str__(self):
        return self.render()

    def __repr__(self):
        return f"<FieldValue {self.render()}>"


FieldValue.UNCONSTRAINED = FieldValue()


def _pieces(value):
    if isinstance(value, (list, tuple)):
        for item in value:
            yield from _pieces(item)
    elif isinstance(value, int) and not isinstance(value, bool):
        yield str(value)
    elif isinstance(value, str):
        for piece in value.split(","):
            yield piece.strip()
    else:
        raise ValidationError(f"{value!r} is not a valid value")


def normalize_field(value, kind):
    """
    Turn a raw schedule field value into a :class:`FieldValue`.

    ``value`` may be ``None`` or ``*`` (unconstrained), an integer, a comma
    separated string or a list of any of those. Each piece is normalized on
    its own and the original ordering is kept.
    """
    if kind not in FIELD_SPECS:
        raise ValidationError(f"{kind} is not a schedule field")
    if value is None or value == UNCONSTRAINED or value == [UNCONSTRAINED]:
        return FieldValue.UNCONSTRAINED
    try:
        pieces = list(_pieces(value))
    except ValidationError as exc:
        raise ValidationError(f"{value!r} is not a valid {kind}") from exc
    if not pieces:
        raise ValidationError(f"{value!r} is not a valid {kind}")
    return FieldValue(normalize(piece, kind) for piece in pieces)
