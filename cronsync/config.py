"""
All cronsync configuration loading and defaults should be in this module
"""

import copy
import logging
import os

import yaml

import cronsync.exceptions
from cronsync._logging import (
    DFLT_LOG_DATEFMT,
    DFLT_LOG_DATEFMT_LOGFILE,
    DFLT_LOG_FMT_CONSOLE,
    DFLT_LOG_FMT_LOGFILE,
)

log = logging.getLogger(__name__)

DEFAULT_CONF_FILE = os.path.join(os.sep, "etc", "cronsync", "cronsync.conf")

# Mirrors Ruby's Time#to_s so headers look like the ones already on disk
DEFAULT_HEADER_TIMEFMT = "%a %b %d %H:%M:%S %Z %Y"

VALID_TAB_BACKENDS = ("auto", "crontab", "suntab", "file")

# Validate the type of each option
VALID_OPTS = {
    # Name written in the generated header, "by <agent>"
    "agent": str,
    # strftime() format of the header timestamp
    "header_timefmt": str,
    # One of VALID_TAB_BACKENDS
    "tab_backend": str,
    # Directory holding one file per user for the 'file' backend
    "tab_dir": str,
    # Path or name of the crontab binary
    "crontab_cmd": str,
    # Resolve declared users through the password database
    "validate_users": bool,
    "conf_file": str,
    "log_file": (type(None), str),
    "log_level": str,
    "log_level_logfile": (type(None), str),
    "log_fmt_console": str,
    "log_fmt_logfile": str,
    "log_datefmt": str,
    "log_datefmt_logfile": str,
    "log_rotate_max_bytes": int,
    "log_rotate_backup_count": int,
}

DEFAULT_OPTS = {
    "agent": "cronsync",
    "header_timefmt": DEFAULT_HEADER_TIMEFMT,
    "tab_backend": "auto",
    "tab_dir": os.path.join(os.sep, "var", "spool", "cron", "crontabs"),
    "crontab_cmd": "crontab",
    "validate_users": True,
    "conf_file": DEFAULT_CONF_FILE,
    "log_file": None,
    "log_level": "warning",
    "log_level_logfile": None,
    "log_fmt_console": DFLT_LOG_FMT_CONSOLE,
    "log_fmt_logfile": DFLT_LOG_FMT_LOGFILE,
    "log_datefmt": DFLT_LOG_DATEFMT,
    "log_datefmt_logfile": DFLT_LOG_DATEFMT_LOGFILE,
    "log_rotate_max_bytes": 0,
    "log_rotate_backup_count": 0,
}


def _validate_opts(opts):
    """
    Check that all of the types of values passed into the config are
    of the right types
    """
    errors = []

    err = (
        "Config option '{}' with value {} has an invalid type of {}, a "
        "{} is required for this option"
    )
    for key, val in opts.items():
        if key not in VALID_OPTS:
            continue
        valid_type = VALID_OPTS[key]
        # int(True) evaluates to 1, int(False) evaluates to 0
        # We want to make sure True and False are only valid for bool
        if val is True or val is False:
            if valid_type is bool:
                continue
        elif isinstance(val, valid_type):
            continue
        if isinstance(valid_type, tuple):
            type_name = " or ".join(
                "None" if item is type(None) else item.__name__ for item in valid_type
            )
        else:
            type_name = valid_type.__name__
        errors.append(err.format(key, val, type(val).__name__, type_name))

    if opts.get("tab_backend") not in VALID_TAB_BACKENDS:
        errors.append(
            "Config option 'tab_backend' must be one of {}, not {!r}".format(
                ", ".join(VALID_TAB_BACKENDS), opts.get("tab_backend")
            )
        )

    for error in errors:
        log.warning(error)
    if errors:
        return False
    return True


def _read_conf_file(path):
    """
    Read in a config file from a given path and process it into a dictionary
    """
    log.debug("Reading configuration from %s", path)
    with open(path, encoding="utf-8") as conf_file:
        try:
            conf_opts = yaml.safe_load(conf_file) or {}
        except yaml.YAMLError as err:
            message = f"Error parsing configuration file: {path} - {err}"
            log.error(message)
            raise cronsync.exceptions.CronsyncConfigurationError(message)

    # only interpret documents as a valid conf, not things like strings,
    # which might have been caused by invalid yaml syntax
    if not isinstance(conf_opts, dict):
        message = (
            "Error parsing configuration file: {} - conf "
            "should be a document, not {}.".format(path, type(conf_opts))
        )
        log.error(message)
        raise cronsync.exceptions.CronsyncConfigurationError(message)
    return conf_opts


def load_config(path, env_var="CRONSYNC_CONFIG", default_path=DEFAULT_CONF_FILE):
    """
    Returns configuration dict from parsing either the file described by
    ``path`` or the environment variable described by ``env_var`` as YAML.
    """
    if path is None:
        # When the passed path is None, we just want the configuration
        # defaults, not actually loading the whole configuration.
        return {}

    # Default to the environment variable path, if it exists
    env_path = os.environ.get(env_var, path)
    if not env_path or not os.path.isfile(env_path):
        env_path = path
    # If a non-default path was explicitly passed, use that over the env variable
    if path != default_path:
        env_path = path

    path = env_path

    opts = {}

    if os.path.isfile(path) and os.access(path, os.R_OK):
        opts = _read_conf_file(path)
        opts["conf_file"] = path
    else:
        log.debug("Missing configuration file: %s", path)

    return opts


def apply_config(overrides=None, defaults=None):
    """
    Returns the cronsync opts, the defaults updated with the overrides
    """
    if defaults is None:
        defaults = DEFAULT_OPTS

    opts = copy.deepcopy(defaults)
    if overrides:
        opts.update(overrides)

    if not _validate_opts(opts):
        raise cronsync.exceptions.CronsyncConfigurationError(
            "Invalid configuration, see the warnings logged above"
        )
    return opts


def cronsync_config(path=DEFAULT_CONF_FILE, overrides=None, defaults=None):
    """
    Reads in the cronsync configuration file and sets up special options

    .. code-block:: python

        import cronsync.config
        opts = cronsync.config.cronsync_config("/etc/cronsync/cronsync.conf")
    """
    opts = load_config(path, default_path=DEFAULT_CONF_FILE)
    if overrides:
        opts.update(overrides)
    return apply_config(opts, defaults)
