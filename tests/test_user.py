from unittest.mock import patch

import pytest

import cronsync.utils.user
from cronsync.exceptions import UserLookupError


def test_resolve_root():
    assert cronsync.utils.user.resolve("root") == 0


def test_resolve_uid():
    assert cronsync.utils.user.resolve(1000) == 1000


def test_resolve_unknown():
    with pytest.raises(UserLookupError) as excinfo:
        cronsync.utils.user.resolve("no-such-user-here")
    assert isinstance(excinfo.value, LookupError)
    assert str(excinfo.value) == "User no-such-user-here not found"


def test_get_uid_unknown():
    assert cronsync.utils.user.get_uid("no-such-user-here") is None


def test_check_uid_match():
    with patch("os.geteuid", return_value=0):
        assert cronsync.utils.user.check_uid_match("root")
    with patch("os.geteuid", return_value=12345):
        assert not cronsync.utils.user.check_uid_match("root")


def test_get_uid_current_user():
    with patch("os.geteuid", return_value=4321):
        assert cronsync.utils.user.get_uid() == 4321
