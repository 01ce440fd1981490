import os
import stat
from unittest.mock import MagicMock, patch

import pytest

import cronsync.store
from cronsync.exceptions import StoreError
from cronsync.store import CrontabStore, FileStore, SunCrontabStore, get_store


def _proc(stdout="", stderr="", returncode=0):
    proc = MagicMock()
    proc.communicate.return_value = (stdout, stderr)
    proc.returncode = returncode
    proc.pid = 4242
    return proc


@pytest.fixture
def popen():
    with patch("cronsync.store.subprocess.Popen") as mock:
        mock.return_value = _proc()
        yield mock


@pytest.fixture
def same_user():
    with patch("cronsync.utils.user.check_uid_match", return_value=True):
        yield


@pytest.fixture
def other_user():
    with patch("cronsync.utils.user.check_uid_match", return_value=False):
        yield


def test_file_store_missing(tmp_path):
    assert FileStore("root", str(tmp_path)).read() == ("", False)


def test_file_store_write_read(tmp_path):
    store = FileStore("root", str(tmp_path / "tabs"))
    store.write("* * * * * /bin/true\n")
    assert store.read() == ("* * * * * /bin/true\n", True)
    mode = stat.S_IMODE(os.stat(store.path).st_mode)
    assert mode == 0o600
    # no temporary file left behind
    assert os.listdir(str(tmp_path / "tabs")) == ["root"]


def test_file_store_remove(tmp_path):
    store = FileStore("root", str(tmp_path))
    store.write("* * * * * /bin/true\n")
    store.remove()
    assert not os.path.exists(store.path)
    # removing twice is fine
    store.remove()


def test_crontab_read_own(popen, same_user):
    popen.return_value = _proc(stdout="* * * * * /bin/true\n")
    assert CrontabStore("root").read() == ("* * * * * /bin/true\n", True)
    assert popen.call_args[0][0] == ["crontab", "-l"]


def test_crontab_read_other_user(popen, other_user):
    CrontabStore("bob", crontab_cmd="/usr/bin/crontab").read()
    assert popen.call_args[0][0] == ["/usr/bin/crontab", "-u", "bob", "-l"]


def test_crontab_read_strips_banner(popen, same_user):
    popen.return_value = _proc(
        stdout=(
            "# DO NOT EDIT THIS FILE - edit the master and reinstall.\n"
            "# (/tmp/crontab.1234 installed on Mon Oct 19 12:00:00 2026)\n"
            "# (Cron version -- $Id: crontab.c,v 2.13 1994/01/17 03:20:37 vixie Exp $)\n"
            "* * * * * /bin/true\n"
        )
    )
    assert CrontabStore("root").read() == ("* * * * * /bin/true\n", True)


def test_crontab_read_no_crontab(popen, same_user):
    popen.return_value = _proc(stderr="no crontab for root\n", returncode=1)
    assert CrontabStore("root").read() == ("", False)


def test_crontab_write(popen, same_user):
    written = {}

    def communicate():
        path = popen.call_args[0][0][-1]
        with open(path, encoding="utf-8") as fp_:
            written["text"] = fp_.read()
        written["path"] = path
        return "", ""

    popen.return_value.communicate.side_effect = communicate
    CrontabStore("root").write("* * * * * /bin/true\n")
    assert written["text"] == "* * * * * /bin/true\n"
    assert not os.path.exists(written["path"])


def test_crontab_write_failure(popen, same_user):
    popen.return_value = _proc(stderr="crontab: bad minute\n", returncode=1)
    with pytest.raises(StoreError) as excinfo:
        CrontabStore("root").write("bogus\n")
    assert excinfo.value.info == {"retcode": 1, "stderr": "crontab: bad minute"}
    assert "Failed to write the crontab of root" in str(excinfo.value)
    path = popen.call_args[0][0][-1]
    assert not os.path.exists(path)


def test_crontab_remove(popen, other_user):
    CrontabStore("bob").remove()
    assert popen.call_args[0][0] == ["crontab", "-u", "bob", "-r"]


def test_crontab_remove_missing(popen, same_user):
    popen.return_value = _proc(stderr="crontab: no crontab for root\n", returncode=1)
    CrontabStore("root").remove()


def test_crontab_remove_failure(popen, same_user):
    popen.return_value = _proc(stderr="crontab: permission denied\n", returncode=1)
    with pytest.raises(StoreError):
        CrontabStore("root").remove()


def test_crontab_missing_binary(popen, same_user):
    popen.side_effect = FileNotFoundError(2, "No such file or directory")
    with pytest.raises(StoreError) as excinfo:
        CrontabStore("root").read()
    assert "Unable to run 'crontab'" in str(excinfo.value)


def test_suntab_runs_as_user(popen):
    popen.return_value = _proc(stdout="* * * * * /bin/true\n")
    assert SunCrontabStore("bob").read() == ("* * * * * /bin/true\n", True)
    assert popen.call_args[0][0] == ["su", "-", "bob", "-c", "crontab -l"]


def test_run_all():
    with patch("cronsync.store.subprocess.Popen", return_value=_proc("out", "err", 3)):
        ret = cronsync.store._run_all(["true"])
    assert ret == {"pid": 4242, "retcode": 3, "stdout": "out", "stderr": "err"}


@pytest.mark.parametrize(
    "backend,cls", [("crontab", CrontabStore), ("suntab", SunCrontabStore)]
)
def test_get_store(backend, cls):
    store = get_store("root", {"tab_backend": backend, "crontab_cmd": "crontab"})
    assert type(store) is cls
    assert store.user == "root"


def test_get_store_file(tmp_path):
    store = get_store("root", {"tab_backend": "file", "tab_dir": str(tmp_path)})
    assert isinstance(store, FileStore)
    assert store.path == os.path.join(str(tmp_path), "root")


@pytest.mark.parametrize(
    "system,cls",
    [("SunOS", SunCrontabStore), ("AIX", SunCrontabStore), ("Linux", CrontabStore)],
)
def test_get_store_auto(system, cls):
    with patch("cronsync.store.platform.system", return_value=system):
        store = get_store("root", {"tab_backend": "auto"})
    assert type(store) is cls


def test_get_store_unknown():
    with pytest.raises(StoreError):
        get_store("root", {"tab_backend": "ldap"})


def test_file_store_not_utf8(tmp_path):
    (tmp_path / "root").write_bytes(b"# caf\xe9\n* * * * * /bin/true\n")
    with pytest.raises(StoreError) as excinfo:
        FileStore("root", str(tmp_path)).read()
    assert "Failed to read" in str(excinfo.value)


def test_strip_banner_splits_on_newlines_only():
    text = (
        "# DO NOT EDIT THIS FILE - edit the master and reinstall.\n"
        "# (/tmp/crontab.1234\x0c installed on Mon Oct 19 12:00:00 2026)\n"
        "# (Cron version -- $Id: crontab.c,v 2.13 1994/01/17 03:20:37 vixie Exp $)\n"
        "# page\x0cbreak\n"
        "* * * * * /bin/true\n"
    )
    stripped = cronsync.store._strip_banner(text)
    assert stripped == "# page\x0cbreak\n* * * * * /bin/true\n"
