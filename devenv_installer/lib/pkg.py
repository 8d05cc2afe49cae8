from __future__ import annotations

import logging
import shutil
from typing import Sequence

from .command import run_cmd
from .retry import Outcome
from .runners import CommandRunner

logger = logging.getLogger(__name__)


def dnf_upgrade(runner: CommandRunner) -> Outcome:
    return runner.run(["dnf", "-y", "upgrade", "--refresh"])


def dnf_install(runner: CommandRunner, packages: Sequence[str]) -> Outcome:
    pkgs = [p for p in packages if p]
    if not pkgs:
        raise ValueError("dnf_install needs at least one package")
    return runner.run(["dnf", "install", "-y", *pkgs])


def dnf_add_repo(runner: CommandRunner, repofile_url: str) -> Outcome:
    # dnf5 syntax; dnf5-plugins must be installed first.
    return runner.run(["dnf", "config-manager", "addrepo", f"--from-repofile={repofile_url}"])


def command_exists(name: str) -> bool:
    return shutil.which(name) is not None


def flatpak_has_app(app_id: str, *, dry_run: bool = False) -> bool:
    if dry_run:
        return False
    r = run_cmd(["flatpak", "list", "--app", "--columns=application"], check=False)
    if r.returncode != 0:
        return False
    return app_id in r.stdout.split()


def flatpak_add_remote(runner: CommandRunner, name: str, url: str) -> Outcome:
    return runner.run(["flatpak", "remote-add", "--if-not-exists", name, url])


def flatpak_install(runner: CommandRunner, remote: str, app_id: str) -> Outcome:
    return runner.run(["flatpak", "install", "-y", "--noninteractive", remote, app_id])
