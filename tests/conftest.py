# tests/conftest.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from devenv_installer.context import InstallContext
from devenv_installer.install_config import InstallConfig
from devenv_installer.lib.manifests import ToolManifest, load_manifest
from devenv_installer.lib.shellrc import ShellBlockEditor
from devenv_installer.lib.users import UserContext

from .helpers import FakeRunner, SleepRecorder, policy


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def install_config() -> InstallConfig:
    return InstallConfig(
        network=policy(name="network"),
        package=policy(name="package"),
        installer=policy(name="installer"),
        log_path="",
    )


@pytest.fixture
def home(tmp_path: Path) -> Path:
    h = tmp_path / "home" / "dev"
    h.mkdir(parents=True)
    return h


@pytest.fixture
def make_ctx(install_config, home):
    """Build an InstallContext around fake runners."""

    def _make(
        *,
        username: str = "dev",
        network: Optional[FakeRunner] = None,
        package: Optional[FakeRunner] = None,
        installer: Optional[FakeRunner] = None,
        dry_run: bool = False,
        resolved: bool = True,
        manifest: Optional[ToolManifest] = None,
    ) -> InstallContext:
        user = UserContext(
            username=username,
            home=home,
            resolved=resolved,
            uid=0 if username == "root" else 1000,
            gid=0 if username == "root" else 1000,
        )
        return InstallContext(
            config=install_config,
            user=user,
            manifest=manifest or load_manifest(),
            network=network or FakeRunner("network"),
            package=package or FakeRunner("package"),
            installer=installer or FakeRunner("installer"),
            shellrc=ShellBlockEditor(dry_run=dry_run),
            dry_run=dry_run,
        )

    return _make
