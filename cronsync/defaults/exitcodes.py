"""
cronsync exit codes.

Here are redefined the os.EX_* exit codes cronsync uses, since they are Unix
only. See `sysexits.h` for more information.
"""

EX_GENERIC = 1  # Catchall for general errors
                # NOTE: for uncaught exceptions, please use EX_SOFTWARE error.

EX_OK = 0            # No error occurred
EX_USAGE = 64        # The command was used incorrectly
EX_DATAERR = 65      # The input data was incorrect, e.g. an invalid schedule field
EX_NOINPUT = 66      # An input file did not exist or was not readable.
EX_NOUSER = 67       # Specified user did not exist.
EX_UNAVAILABLE = 69  # Required service is unavailable, e.g. no crontab binary
EX_SOFTWARE = 70     # Internal software error was detected.
EX_OSERR = 71        # Operating system error was detected.
EX_IOERR = 74        # Error occurred while doing I/O on some file.
EX_NOPERM = 77       # Insufficient permissions to perform the operation.
EX_CONFIG = 78       # Configuration error occurred.
