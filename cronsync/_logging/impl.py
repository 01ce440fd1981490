"""
    cronsync._logging.impl
    ~~~~~~~~~~~~~~~~~~~~~~

    cronsync's logging implementation functionality
"""

import atexit
import logging
import logging.handlers
import os
import sys

# Define the custom logging level before anything logs with it
TRACE = logging.TRACE = 5
QUIET = logging.QUIET = 1000

from cronsync.exceptions import LoggingRuntimeError  # isort:skip

LOG_LEVELS = {
    "all": logging.NOTSET,
    "debug": logging.DEBUG,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "info": logging.INFO,
    "quiet": QUIET,
    "trace": TRACE,
    "warning": logging.WARNING,
}

SORTED_LEVEL_NAMES = [l[0] for l in sorted(LOG_LEVELS.items(), key=lambda x: x[1])]

DFLT_LOG_DATEFMT = "%H:%M:%S"
DFLT_LOG_DATEFMT_LOGFILE = "%Y-%m-%d %H:%M:%S"
DFLT_LOG_FMT_CONSOLE = "[%(levelname)-8s] %(message)s"
DFLT_LOG_FMT_LOGFILE = "%(asctime)s,%(msecs)03d [%(name)-17s:%(lineno)-4d][%(levelname)-8s][%(process)d] %(message)s"

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(QUIET, "QUIET")


def _trace(self, msg, *args, **kwargs):
    if self.isEnabledFor(TRACE):
        self._log(TRACE, msg, args, **kwargs)


logging.Logger.trace = _trace

log = logging.getLogger(__name__)


def get_logging_level_from_string(level):
    """
    Return an integer matching a logging level.
    Return logging.ERROR when not matching.
    Return logging.WARNING when the passed level is None
    """
    if level is None:
        return logging.WARNING

    if isinstance(level, int):
        # Level is already an integer, return it
        return level
    try:
        return LOG_LEVELS[level.lower()]
    except KeyError:
        if level:
            log.warning(
                "Could not translate the logging level string '%s' "
                "into an actual logging level integer. Returning "
                "'logging.ERROR'.",
                level,
            )
        # Couldn't translate the passed string into a logging level.
        return logging.ERROR


def get_console_handler():
    """
    Get the console stream handler
    """
    try:
        return setup_console_handler.__handler__
    except AttributeError:
        return


def is_console_handler_configured():
    """
    Is the console stream handler configured
    """
    return get_console_handler() is not None


def shutdown_console_handler():
    """
    Shutdown the console stream handler
    """
    console_handler = get_console_handler()
    if console_handler is not None:
        logging.root.removeHandler(console_handler)
        console_handler.close()
        setup_console_handler.__handler__ = None
        atexit.unregister(shutdown_console_handler)


def setup_console_handler(log_level=None, log_format=None, date_format=None):
    """
    Setup the console stream handler
    """
    if is_console_handler_configured():
        log.warning("Console logging already configured")
        return

    atexit.register(shutdown_console_handler)

    log.trace(
        "Setting up console logging: %s",
        dict(log_level=log_level, log_format=log_format, date_format=date_format),
    )

    if log_level is None:
        log_level = logging.WARNING

    log_level = get_logging_level_from_string(log_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)

    # Set the default console formatter config
    if not log_format:
        log_format = DFLT_LOG_FMT_CONSOLE
    if not date_format:
        date_format = DFLT_LOG_DATEFMT

    formatter = logging.Formatter(log_format, datefmt=date_format)

    handler.setFormatter(formatter)
    logging.root.addHandler(handler)

    setup_console_handler.__handler__ = handler


def get_logfile_handler():
    """
    Get the log file handler
    """
    try:
        return setup_logfile_handler.__handler__
    except AttributeError:
        return


def is_logfile_handler_configured():
    """
    Is the log file handler configured
    """
    return get_logfile_handler() is not None


def shutdown_logfile_handler():
    """
    Shutdown the log file handler
    """
    logfile_handler = get_logfile_handler()
    if logfile_handler is not None:
        logging.root.removeHandler(logfile_handler)
        logfile_handler.close()
        setup_logfile_handler.__handler__ = None
        atexit.unregister(shutdown_logfile_handler)


def setup_logfile_handler(
    log_path,
    log_level=None,
    log_format=None,
    date_format=None,
    max_bytes=0,
    backup_count=0,
):
    """
    Setup the log file handler

    A rotating file handler is used when ``max_bytes`` is greater than zero,
    otherwise the file is watched so that external log rotation works.
    """
    if is_logfile_handler_configured():
        log.warning("Logfile logging already configured")
        return

    log.trace(
        "Setting up log file logging: %s",
        dict(
            log_path=log_path,
            log_level=log_level,
            log_format=log_format,
            date_format=date_format,
            max_bytes=max_bytes,
            backup_count=backup_count,
        ),
    )

    if log_path is None:
        log.warning("log_path setting is set to `None`. Nothing else to do")
        return

    if log_level is None:
        log_level = logging.WARNING

    log_level = get_logging_level_from_string(log_level)

    log_dir = os.path.dirname(log_path)
    if log_dir and not os.path.isdir(log_dir):
        try:
            os.makedirs(log_dir, mode=0o750)
        except OSError as exc:
            raise LoggingRuntimeError(
                f"Failed to create the log directory {log_dir}: {exc}"
            ) from exc

    try:
        # Logfile logging is UTF-8 on purpose, crontab commands are not
        # guaranteed to be plain ASCII.
        if max_bytes > 0:
            handler = logging.handlers.RotatingFileHandler(
                log_path,
                mode="a",
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
                delay=0,
            )
        else:
            handler = logging.handlers.WatchedFileHandler(
                log_path, mode="a", encoding="utf-8", delay=0
            )
    except OSError:
        log.warning(
            "Failed to open log file, do you have permission to write to %s?",
            log_path,
        )
        # The console handler, if any, is already there for the user to see
        # the error.
        return

    atexit.register(shutdown_logfile_handler)

    handler.setLevel(log_level)

    if not log_format:
        log_format = DFLT_LOG_FMT_LOGFILE
    if not date_format:
        date_format = DFLT_LOG_DATEFMT_LOGFILE

    formatter = logging.Formatter(log_format, datefmt=date_format)

    handler.setFormatter(formatter)
    logging.root.addHandler(handler)

    setup_logfile_handler.__handler__ = handler


def set_lowest_log_level_by_opts(opts):
    """
    Set the root logger level to the lowest level any handler needs
    """
    log_levels = [get_logging_level_from_string(opts.get("log_level"))]
    if opts.get("log_file"):
        log_levels.append(
            get_logging_level_from_string(
                opts.get("log_level_logfile") or opts.get("log_level")
            )
        )
    logging.root.setLevel(min(log_levels))


def setup_logging(opts):
    """
    Configure console and log file logging from the passed options
    """
    if not is_console_handler_configured():
        setup_console_handler(
            log_level=opts["log_level"],
            log_format=opts["log_fmt_console"],
            date_format=opts["log_datefmt"],
        )
    if opts.get("log_file") and not is_logfile_handler_configured():
        log_file_level = opts["log_level_logfile"] or opts["log_level"]
        if log_file_level != "quiet":
            setup_logfile_handler(
                log_path=opts["log_file"],
                log_level=log_file_level,
                log_format=opts["log_fmt_logfile"],
                date_format=opts["log_datefmt_logfile"],
                max_bytes=opts["log_rotate_max_bytes"],
                backup_count=opts["log_rotate_backup_count"],
            )
    set_lowest_log_level_by_opts(opts)


def shutdown_logging():
    if is_logfile_handler_configured():
        shutdown_logfile_handler()
    if is_console_handler_configured():
        shutdown_console_handler()
