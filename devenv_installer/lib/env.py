from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    log_default: str = "/var/log/devenv-installer.log"
    local_bin: str = "/usr/local/bin"
    gh_repo_file: str = "/etc/yum.repos.d/gh-cli.repo"
    snap_link: str = "/snap"
    snap_target: str = "/var/lib/snapd/snap"


PATHS = Paths()

ENV_PREFIX = "DEVENV_"
