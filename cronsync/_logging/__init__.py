"""
    cronsync._logging
    ~~~~~~~~~~~~~~~~~

    This is cronsync's logging setup.
    As the name suggests, this is considered an internal API which can change
    without notice.

    The ``cronsync._logging`` package is imported by ``cronsync`` itself since
    it adds the ``trace`` level to python's logging system.
"""

from cronsync._logging.impl import (
    DFLT_LOG_DATEFMT,
    DFLT_LOG_DATEFMT_LOGFILE,
    DFLT_LOG_FMT_CONSOLE,
    DFLT_LOG_FMT_LOGFILE,
    LOG_LEVELS,
    SORTED_LEVEL_NAMES,
    TRACE,
    get_console_handler,
    get_logfile_handler,
    get_logging_level_from_string,
    is_console_handler_configured,
    is_logfile_handler_configured,
    set_lowest_log_level_by_opts,
    setup_console_handler,
    setup_logfile_handler,
    setup_logging,
    shutdown_console_handler,
    shutdown_logfile_handler,
    shutdown_logging,
)
