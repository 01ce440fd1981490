import pytest

from cronsync.entry import CronEntry, ForeignLine
from cronsync.exceptions import ValidationError
from cronsync.render import render_body, render_header, render_tab, to_cron, to_line
from tests.support.memstore import STAMP

HEADER = (
    "#This file was autogenerated at Mon Oct 19 12:00:00 UTC 2026 by cronsync. While it\n"
    "# can still be managed manually, it is definitely not recommended.\n"
    "# Note particularly that the comments starting with 'Puppet Name' should\n"
    "# not be deleted, as doing so could cause duplicate cron jobs.\n"
)


def _backup():
    return CronEntry.declare(
        "backup",
        "root",
        command="/usr/bin/backup.sh",
        minute=30,
        hour=2,
        weekday="mon",
        resolver=False,
    )


def test_header():
    assert render_header("cronsync", STAMP) == HEADER


def test_header_agent():
    first = render_header("puppet", STAMP).splitlines()[0]
    assert first == f"#This file was autogenerated at {STAMP} by puppet. While it"


def test_line():
    assert to_line(_backup()) == "30 2 * * 1 /usr/bin/backup.sh"


def test_cron():
    assert to_cron(_backup()) == "# Puppet Name: backup\n30 2 * * 1 /usr/bin/backup.sh"


def test_multiple_values():
    entry = CronEntry.declare(
        "twice", "root", command="/bin/true", minute="0,30", resolver=False
    )
    assert to_line(entry) == "0,30 * * * * /bin/true"


def test_missing_command():
    entry = CronEntry.declare("nocmd", "root", minute=1, resolver=False)
    with pytest.raises(ValidationError):
        to_line(entry)
    with pytest.raises(ValidationError):
        render_tab([entry], stamp=STAMP)


def test_declared_value_wins():
    entry = CronEntry("job", "root")
    entry.observe("command", "/bin/old")
    entry.observe("hour", "2")
    entry.should("hour", "3")
    assert to_line(entry) == "* 3 * * * /bin/old"
    entry.should("command", "/bin/new")
    assert to_line(entry) == "* 3 * * * /bin/new"


def test_declared_unconstrained_wins():
    entry = CronEntry("job", "root")
    entry.observe("command", "/bin/true")
    entry.observe("minute", "5")
    entry.should("minute", "*")
    assert to_line(entry) == "* * * * * /bin/true"


def test_body_keeps_foreign_lines_in_place():
    items = [ForeignLine("# first"), _backup(), ForeignLine(""), ForeignLine("MAILTO=root")]
    assert render_body(items) == (
        "# first\n"
        "# Puppet Name: backup\n"
        "30 2 * * 1 /usr/bin/backup.sh\n"
        "\n"
        "MAILTO=root"
    )


def test_tab():
    text = render_tab([_backup()], stamp=STAMP)
    assert text == HEADER + "# Puppet Name: backup\n30 2 * * 1 /usr/bin/backup.sh\n"
    assert text.endswith("sh\n")
    assert not text.endswith("\n\n")


def test_tab_without_items():
    assert render_tab([], stamp=STAMP) == HEADER
