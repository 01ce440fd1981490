"""
This module is a central location for all cronsync exceptions
"""

import logging

import yaml

import cronsync.defaults.exitcodes

log = logging.getLogger(__name__)


def _nested_output(obj):
    """
    Serialize obj and format for output
    """
    return yaml.safe_dump(obj, default_flow_style=False).rstrip()


class CronsyncException(Exception):
    """
    Base exception class; all cronsync-specific exceptions should subclass this
    """

    exitcode = cronsync.defaults.exitcodes.EX_GENERIC

    def __init__(self, message=""):
        if not isinstance(message, str):
            message = str(message)
        super().__init__(message)
        self.message = self.strerror = message

    def pack(self):
        """
        Pack this exception into a serializable dictionary
        """
        return {"message": str(self), "args": self.args}


class ValidationError(CronsyncException, ValueError):
    """
    Used when a schedule field or a declared job fails validation, or when a
    job without a command is about to be written
    """

    exitcode = cronsync.defaults.exitcodes.EX_DATAERR


class ParseError(CronsyncException):
    """
    Used when an existing crontab cannot be parsed. The whole table is
    rejected, no line is skipped.
    """

    exitcode = cronsync.defaults.exitcodes.EX_DATAERR

    def __init__(self, message="", line=None):
        super().__init__(message)
        self.line = line


class UserLookupError(CronsyncException, LookupError):
    """
    Used when a declared user does not exist on the system
    """

    exitcode = cronsync.defaults.exitcodes.EX_NOUSER


class CommandExecutionError(CronsyncException):
    """
    Used when a command returns an error and we want to show the user the
    output gracefully instead of dying
    """

    def __init__(self, message="", info=None):
        exc_str = str(message)
        self.error = exc_str
        self.info = info
        if self.info:
            if exc_str:
                if exc_str[-1] not in ".?!":
                    exc_str += "."
                exc_str += " "
            exc_str += "Additional info follows:\n\n" + _nested_output(self.info)
        super().__init__(exc_str)


class StoreError(CommandExecutionError):
    """
    Used when reading, writing or removing a user's crontab fails
    """

    exitcode = cronsync.defaults.exitcodes.EX_IOERR


class CronsyncConfigurationError(CronsyncException):
    """
    Configuration error
    """

    exitcode = cronsync.defaults.exitcodes.EX_CONFIG


class LoggingRuntimeError(RuntimeError):
    """
    Raised when we encounter an error while logging
    """
