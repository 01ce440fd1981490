"""
The known cron jobs and lines, by user
"""

import logging

from cronsync.entry import CronEntry

log = logging.getLogger(__name__)


class UserTable:
    """
    The ordered lines of one user's crontab: :class:`CronEntry` objects and
    :class:`ForeignLine` strings. The order is the one written back.
    """

    def __init__(self, user):
        self.user = user
        self.items = []
        # The timestamp and body of the generated table last read, if any
        self.header_stamp = None
        self.loaded_body = None
        # Set when a job was dropped since the table was last read or written
        self.dirty = False

    def entries(self):
        return [item for item in self.items if isinstance(item, CronEntry)]

    def find(self, name):
        for item in self.items:
            if isinstance(item, CronEntry) and item.name == name:
                return item
        return None

    def append(self, item):
        self.items.append(item)

    def remove(self, entry):
        items = [item for item in self.items if item is not entry]
        if len(items) != len(self.items):
            self.dirty = True
        self.items = items

    def __len__(self):
        return len(self.entries())

    def __iter__(self):
        return iter(self.items)


class Registry:
    """
    Maps user names to their :class:`UserTable`. Tables are created lazily.
    """

    def __init__(self):
        self._tabs = {}

    def __contains__(self, user):
        return user in self._tabs

    def get(self, user):
        return self._tabs.get(user)

    def table(self, user):
        """
        Return the table of ``user``, creating an empty one if needed
        """
        if user not in self._tabs:
            self._tabs[user] = UserTable(user)
        return self._tabs[user]

    def find(self, user, name):
        tab = self._tabs.get(user)
        if tab is None:
            return None
        return tab.find(name)

    def users(self):
        return list(self._tabs)

    def delete(self, entry):
        tab = self._tabs.get(entry.user)
        if tab is not None:
            tab.remove(entry)

    def clear(self):
        self._tabs = {}
