"""
Converge users' crontabs to the declared cron jobs.

A reconciliation reads the crontab of a user, merges the declared jobs into
it and writes the whole table back:

.. code-block:: python

    import cronsync.reconcile

    reconciler = cronsync.reconcile.Reconciler.from_opts()
    ret = reconciler.sync(
        "root",
        [{"name": "backup", "user": "root", "command": "/usr/bin/backup.sh",
          "minute": 30, "hour": 2, "weekday": "mon"}],
    )

Only one reconciliation may run at a time for a given user.
"""

import logging

import cronsync.config
import cronsync.utils.user
from cronsync.entry import CronEntry, entry_from_mapping
from cronsync.parser import TableParser
from cronsync.registry import Registry
from cronsync.render import (
    DEFAULT_AGENT,
    render_body,
    render_tab,
    timestamp,
    to_line,
)
from cronsync.store import get_store

log = logging.getLogger(__name__)


class Reconciler:
    """
    Reads, merges and stores the crontabs of the users in ``registry``.

    ``store_factory`` is called with a user name and returns that user's
    :class:`~cronsync.store.TableStore`. ``resolver`` validates declared users,
    ``False`` disables the lookup.
    """

    def __init__(self, registry=None, store_factory=None, opts=None, resolver=None):
        if opts is None:
            opts = cronsync.config.apply_config()
        self.opts = opts
        self.registry = registry if registry is not None else Registry()
        self.parser = TableParser(self.registry)
        if store_factory is None:
            store_factory = self._default_store
        self._store_factory = store_factory
        if resolver is None:
            if opts.get("validate_users", True):
                resolver = cronsync.utils.user.resolve
            else:
                resolver = False
        self.resolver = resolver
        self._stores = {}

    @classmethod
    def from_opts(cls, opts=None, registry=None):
        """
        Build a reconciler from the configuration file, or from ``opts``
        applied over the defaults
        """
        if opts is None:
            opts = cronsync.config.cronsync_config()
        else:
            opts = cronsync.config.apply_config(opts)
        return cls(registry=registry, opts=opts)

    def _default_store(self, user):
        return get_store(user, self.opts)

    def _store(self, user):
        if user not in self._stores:
            self._stores[user] = self._store_factory(user)
        return self._stores[user]

    def declare(self, decl):
        """
        Return a validated :class:`CronEntry` for a declared job, given as a
        mapping or an entry
        """
        if isinstance(decl, CronEntry):
            return decl
        return entry_from_mapping(decl, resolver=self.resolver)

    def retrieve(self, user):
        """
        Read and parse the crontab of ``user``. Returns the number of jobs
        found, or None when the user has no crontab.
        """
        text, exists = self._store(user).read()
        if not exists:
            log.info("No crontab for %s", user)
            return None
        return self.parser.parse(user, text)

    def _adopt(self, tab, entry, claimed, declared_names):
        """
        Return the job of ``tab`` found in the crontab under another name
        whose line equals the declared ``entry``. Jobs merged already, and jobs
        whose name is declared too, are left alone.
        """
        if entry.command is None:
            return None
        line = to_line(entry)
        for candidate in tab.entries():
            if id(candidate) in claimed or not candidate.observed():
                continue
            if (candidate.user, candidate.name) in declared_names:
                continue
            if to_line(candidate) == line:
                return candidate
        return None

    def merge(self, declared):
        """
        Merge declared jobs into the registry. A job already known under the
        same name gets the declared values; a job of the crontab identical to
        the declared one in all but its name takes the declared name.
        Returns the merged entries.
        """
        entries = [self.declare(decl) for decl in declared]
        declared_names = {(entry.user, entry.name) for entry in entries}
        claimed = set()
        ret = []
        for entry in entries:
            tab = self.registry.table(entry.user)
            existing = tab.find(entry.name)
            if existing is None:
                existing = self._adopt(tab, entry, claimed, declared_names)
                if existing is not None:
                    log.info(
                        "Cron job %s of %s is now named %s",
                        existing.name,
                        entry.user,
                        entry.name,
                    )
                    existing.name = entry.name
                    existing.autonamed = False
            if existing is not None and existing is not entry:
                existing.overlay(entry)
                merged = existing
            else:
                if existing is None:
                    tab.append(entry)
                merged = entry
            claimed.add(id(merged))
            ret.append(merged)
        return ret

    def _render(self, tab):
        """
        Return the body of ``tab`` and the timestamp for its header. The
        timestamp of the table last read is kept as long as the body does not
        change, so that unchanged tables are written back byte for byte.
        """
        body = render_body(tab.items)
        if tab.header_stamp is not None and body == tab.loaded_body:
            stamp = tab.header_stamp
        else:
            stamp = timestamp(
                self.opts.get("header_timefmt", cronsync.config.DEFAULT_HEADER_TIMEFMT)
            )
        return body, stamp

    def tab(self, user):
        """
        Return the text of the crontab of ``user``, or None when there is no
        known table for the user
        """
        tab = self.registry.get(user)
        if tab is None:
            log.info("No cron instances for %s", user)
            return None
        _, stamp = self._render(tab)
        return render_tab(tab.items, self.opts.get("agent", DEFAULT_AGENT), stamp)

    def store(self, user):
        """
        Write the crontab of ``user``. Returns False, writing nothing, when
        there is no job for the user and none was deleted since the crontab
        was read.
        """
        tab = self.registry.get(user)
        if tab is None or not (tab.entries() or tab.dirty):
            log.info("No cron instances for %s", user)
            return False
        body, stamp = self._render(tab)
        text = render_tab(tab.items, self.opts.get("agent", DEFAULT_AGENT), stamp)
        self._store(user).write(text)
        log.debug("Wrote the crontab of %s", user)
        tab.header_stamp = stamp
        tab.loaded_body = body
        tab.dirty = False
        return True

    def remove(self, user):
        """
        Delete the whole crontab of ``user``
        """
        self._store(user).remove()
        log.info("Removed the crontab of %s", user)

    def delete(self, entry):
        """
        Forget a job; it is dropped from the crontab on the next store
        """
        self.registry.delete(entry)

    def clear(self):
        """
        Forget every known table and job
        """
        self.registry.clear()
        self._stores = {}

    def sync(self, user, declared=(), test=False):
        """
        Run a whole reconciliation for ``user``: retrieve, merge, store.

        Returns a dict with the ``name``, ``result``, ``changes`` and
        ``comment`` keys. ``changes`` holds the ``old`` and ``new`` table
        bodies when they differ. With ``test`` nothing is written and
        ``result`` is None when changes are pending.
        """
        ret = {"name": user, "result": True, "changes": {}, "comment": ""}
        declared = [self.declare(decl) for decl in declared]
        for entry in declared:
            if entry.user != user:
                ret["result"] = False
                ret["comment"] = "Cron job {} belongs to {}, not {}".format(
                    entry.name, entry.user, user
                )
                return ret

        self.retrieve(user)
        self.merge(declared)

        tab = self.registry.get(user)
        if tab is None or not tab.entries():
            ret["comment"] = f"No cron jobs to manage for {user}"
            return ret

        old = tab.loaded_body
        new = render_body(tab.items)
        if old != new:
            ret["changes"] = {"old": old, "new": new}

        if not ret["changes"]:
            ret["comment"] = f"The crontab of {user} is in the correct state"
            return ret
        if test:
            ret["result"] = None
            ret["comment"] = f"The crontab of {user} is set to be updated"
            return ret

        self.store(user)
        ret["comment"] = f"The crontab of {user} was updated"
        return ret
