"""
Parse a user's crontab into cron jobs and foreign lines.

Crontab lines carry no identity of their own, so every job written by
cronsync is preceded by a ``# Puppet Name: <name>`` comment. Lines found
without one are matched against the already known jobs of the user by their
rendered text, and get a generated name otherwise.
"""

import itertools
import logging
import re

from cronsync.entry import CronEntry, ForeignLine
from cronsync.exceptions import ParseError, ValidationError
from cronsync.fields import FIELDS, UNCONSTRAINED, FieldValue, normalize_field
from cronsync.render import HEADER_TAIL, MARKER, to_line

log = logging.getLogger(__name__)

MARKER_RE = re.compile(r"^" + re.escape(MARKER) + r"(?P<name>\S.*?)\s*$")
HEADER_RE = re.compile(
    r"^#This file was autogenerated at (?P<stamp>.+) by (?P<agent>\S+?)\.\s+While it$"
)
LINE_RE = re.compile(r"^\s*(\S+)\s+(\S+)\s+(\S+)\s+(\S+)\s+(\S+)\s+(.+?)\s*$")


def _is_env(line):
    """
    True for environment settings such as ``MAILTO=root``
    """
    return line.find("=") > 0 and (
        " " not in line or line.index("=") < line.index(" ")
    )


def _is_foreign(line):
    return line.startswith("#") or not line.strip() or _is_env(line)


def split_lines(text):
    """
    Split a crontab into its lines. Only newlines end a line, like cron reads
    it; one trailing newline is dropped.
    """
    if text.endswith("\n"):
        text = text[:-1]
    if not text:
        return []
    return text.split("\n")


class TableParser:
    """
    Parses tables into the :class:`~cronsync.registry.Registry` it was built
    with. Generated names are unique for the life of the parser.
    """

    def __init__(self, registry):
        self.registry = registry
        self._counter = itertools.count(1)

    def _split_header(self, lines):
        """
        Return the timestamp of the generated header, if any, and the index of
        the first line after it
        """
        if not lines:
            return None, 0
        match = HEADER_RE.match(lines[0])
        if not match:
            return None, 0
        index = 1
        for expected in HEADER_TAIL:
            if index < len(lines) and lines[index] == expected:
                index += 1
            else:
                break
        return match.group("stamp"), index

    def _generate_name(self, taken):
        while True:
            name = "cron-{}".format(next(self._counter))
            if name not in taken:
                return name

    def _parse_line(self, line):
        match = LINE_RE.match(line)
        if not match:
            raise ParseError(f"Could not match '{line}'", line=line)
        values = {}
        for kind, raw in zip(FIELDS, match.groups()):
            if kind == "command":
                values[kind] = raw
            elif raw == UNCONSTRAINED:
                values[kind] = FieldValue.UNCONSTRAINED
            else:
                try:
                    values[kind] = normalize_field(raw, kind)
                except ValidationError as exc:
                    raise ParseError(f"{exc} in '{line}'", line=line) from exc
        return values

    def parse(self, user, text):
        """
        Parse ``text``, the content of the crontab of ``user``, updating the
        registry. Returns the number of jobs found.
        """
        tab = self.registry.table(user)
        known = tab.entries()
        lines = split_lines(text)
        stamp, start = self._split_header(lines)
        body = lines[start:]

        # Names written further down the table must not be generated
        taken = {entry.name for entry in known}
        for line in body:
            match = MARKER_RE.match(line)
            if match:
                taken.add(match.group("name"))

        layout = []
        claimed = {}
        name = None
        count = 0
        for line in body:
            match = MARKER_RE.match(line)
            if match:
                name = match.group("name")
                continue
            if _is_foreign(line):
                layout.append(ForeignLine(line))
                continue

            values = self._parse_line(line)
            entry = self._resolve(user, name, values, line, known, claimed, taken)
            for kind, value in values.items():
                entry.observe(kind, value)
            if id(entry) not in claimed:
                claimed[id(entry)] = entry
                layout.append(entry)
            name = None
            count += 1

        # Jobs declared but not in the table yet keep their order, after it
        layout.extend(entry for entry in known if id(entry) not in claimed)
        tab.items = layout
        tab.header_stamp = stamp
        tab.loaded_body = "\n".join(body)
        tab.dirty = False
        log.trace("Parsed %d cron jobs for %s", count, user)
        return count

    def _resolve(self, user, name, values, line, known, claimed, taken):
        """
        Find the job a table line belongs to, creating it when there is none
        """
        if name is not None:
            for entry in itertools.chain(known, claimed.values()):
                if entry.name == name:
                    return entry

        autonamed = False
        if name is None:
            name = self._generate_name(taken)
            taken.add(name)
            autonamed = True

        # A job with the same command and the same rendered line is the same
        # job, whatever name it was given
        for entry in known:
            if id(entry) in claimed or entry.command != values["command"]:
                continue
            if to_line(entry) == line:
                log.debug("Matched '%s' to cron job %s", line, entry.name)
                return entry

        if autonamed:
            log.info("Autogenerating name %s for %s", name, values["command"])
        return CronEntry(name, user, autonamed=autonamed)
