from cronsync.defaults import exitcodes
from cronsync.exceptions import (
    CommandExecutionError,
    CronsyncConfigurationError,
    CronsyncException,
    ParseError,
    StoreError,
    UserLookupError,
    ValidationError,
)


def test_message():
    exc = CronsyncException("something broke")
    assert str(exc) == exc.message == exc.strerror == "something broke"
    assert exc.pack() == {"message": "something broke", "args": ("something broke",)}


def test_exit_codes():
    assert CronsyncException.exitcode == exitcodes.EX_GENERIC
    assert ValidationError.exitcode == exitcodes.EX_DATAERR
    assert ParseError.exitcode == exitcodes.EX_DATAERR
    assert UserLookupError.exitcode == exitcodes.EX_NOUSER
    assert StoreError.exitcode == exitcodes.EX_IOERR
    assert CronsyncConfigurationError.exitcode == exitcodes.EX_CONFIG


def test_builtin_bases():
    assert isinstance(ValidationError("bad"), ValueError)
    assert isinstance(UserLookupError("bad"), LookupError)


def test_parse_error_line():
    exc = ParseError("Could not match 'x'", line="x")
    assert exc.line == "x"


def test_command_error_info():
    exc = StoreError(
        "Failed to write the crontab of root", info={"retcode": 1, "stderr": "boom"}
    )
    assert str(exc) == (
        "Failed to write the crontab of root. Additional info follows:\n\n"
        "retcode: 1\n"
        "stderr: boom"
    )
    assert exc.error == "Failed to write the crontab of root"


def test_command_error_info_without_message():
    exc = CommandExecutionError(info={"retcode": 2})
    assert str(exc) == "Additional info follows:\n\nretcode: 2"


def test_command_error_no_info():
    exc = CommandExecutionError("plain")
    assert str(exc) == exc.error == "plain"
    assert exc.info is None
