import logging
from types import SimpleNamespace

import pytest

from devenv_installer.errors import UserResolutionError
from devenv_installer.lib.users import UserContext, resolve_user_context


def fake_pwd(accounts):
    def getpwnam(name):
        if name not in accounts:
            raise KeyError(name)
        home, uid = accounts[name]
        return SimpleNamespace(pw_name=name, pw_dir=str(home), pw_uid=uid, pw_gid=uid)

    return getpwnam


def test_prefers_sudo_user(tmp_path):
    alice = tmp_path / "alice"
    alice.mkdir()
    accounts = {"alice": (alice, 1000), "root": (tmp_path, 0)}

    ctx = resolve_user_context({"SUDO_USER": "alice", "USER": "root"}, getpwnam=fake_pwd(accounts))

    assert ctx == UserContext(username="alice", home=alice, resolved=True, uid=1000, gid=1000)
    assert not ctx.is_root
    assert ctx.bashrc == alice / ".bashrc"


def test_falls_through_to_session_user_when_home_missing(tmp_path):
    bob = tmp_path / "bob"
    bob.mkdir()
    accounts = {"alice": (tmp_path / "gone", 1000), "bob": (bob, 1001)}

    ctx = resolve_user_context({"SUDO_USER": "alice", "USER": "bob"}, getpwnam=fake_pwd(accounts))

    assert ctx.username == "bob"
    assert ctx.resolved


def test_root_is_last_candidate(tmp_path):
    accounts = {"root": (tmp_path, 0)}

    ctx = resolve_user_context({}, getpwnam=fake_pwd(accounts))

    assert ctx.username == "root"
    assert ctx.is_root
    assert ctx.resolved


def test_environment_fallback_is_unresolved(tmp_path, caplog):
    with caplog.at_level(logging.WARNING):
        ctx = resolve_user_context({"USER": "ghost", "HOME": str(tmp_path)}, getpwnam=fake_pwd({}))

    assert ctx.username == "ghost"
    assert ctx.home == tmp_path
    assert ctx.resolved is False
    assert ctx.uid is None
    assert any(r.levelno == logging.WARNING for r in caplog.records)


def test_no_account_and_no_environment_is_fatal():
    with pytest.raises(UserResolutionError):
        resolve_user_context({}, getpwnam=fake_pwd({}))


def test_blank_candidates_ignored(tmp_path):
    carol = tmp_path / "carol"
    carol.mkdir()

    ctx = resolve_user_context({"SUDO_USER": "  ", "LOGNAME": "carol"}, getpwnam=fake_pwd({"carol": (carol, 1002)}))

    assert ctx.username == "carol"
