"""
Render cron jobs and user tables back into crontab text
"""

import datetime
import logging

from cronsync.entry import CronEntry
from cronsync.exceptions import ValidationError
from cronsync.fields import SCHEDULE_FIELDS

log = logging.getLogger(__name__)

# Both must stay as they are, tables written by older releases are matched
# against them
MARKER = "# Puppet Name: "
HEADER_FIRST = "#This file was autogenerated at {stamp} by {agent}. While it"
HEADER_TAIL = (
    "# can still be managed manually, it is definitely not recommended.",
    "# Note particularly that the comments starting with 'Puppet Name' should",
    "# not be deleted, as doing so could cause duplicate cron jobs.",
)

DEFAULT_AGENT = "cronsync"
DEFAULT_TIMEFMT = "%a %b %d %H:%M:%S %Z %Y"


def timestamp(timefmt=DEFAULT_TIMEFMT, now=None):
    """
    Return the current local time formatted for the header
    """
    if now is None:
        now = datetime.datetime.now().astimezone()
    return now.strftime(timefmt)


def render_header(agent=DEFAULT_AGENT, stamp=None):
    """
    Return the warning placed at the top of each generated table, newline
    terminated
    """
    if stamp is None:
        stamp = timestamp()
    lines = [HEADER_FIRST.format(stamp=stamp, agent=agent)]
    lines.extend(HEADER_TAIL)
    return "\n".join(lines) + "\n"


def to_line(entry):
    """
    Return the schedule line of ``entry``, without its name comment
    """
    command = entry.get("command")
    if command is None:
        raise ValidationError(f"No command for cron job {entry.name}")
    fields = [entry.get(kind).render() for kind in SCHEDULE_FIELDS]
    fields.append(command)
    return " ".join(fields)


def to_cron(entry):
    """
    Return ``entry`` as its name comment followed by its schedule line
    """
    return f"{MARKER}{entry.name}\n{to_line(entry)}"


def render_body(items):
    """
    Render the jobs and foreign lines of a table, without the header
    """
    ret = []
    for item in items:
        if isinstance(item, CronEntry):
            ret.append(to_cron(item))
        else:
            ret.append(str(item))
    return "\n".join(ret)


def render_tab(items, agent=DEFAULT_AGENT, stamp=None):
    """
    Render a complete table: the header, every item and a trailing newline
    """
    if not items:
        return render_header(agent, stamp)
    return render_header(agent, stamp) + render_body(items) + "\n"
