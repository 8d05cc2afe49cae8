from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from .install_config import InstallConfig
from .lib.manifests import ToolManifest
from .lib.runners import CommandRunner, PackageRunner, build_runners
from .lib.shellrc import ShellBlockEditor
from .lib.users import UserContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallContext:
    """Everything a step reads; built once per run and passed to every step."""

    config: InstallConfig
    user: UserContext
    manifest: ToolManifest
    network: CommandRunner
    package: PackageRunner
    installer: CommandRunner
    shellrc: ShellBlockEditor
    dry_run: bool = False

    @property
    def target_user(self) -> str | None:
        """User to run per-user installers as; None means root."""
        if self.user.is_root or not self.user.resolved:
            return None
        return self.user.username


def build_context(
    *,
    config: InstallConfig,
    user: UserContext,
    manifest: ToolManifest,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> InstallContext:
    if not user.resolved and not user.is_root:
        logger.warning(
            "Could not verify user %s; per-user installers will run as root and install under root's home, "
            "while shell config goes to %s",
            user.username,
            user.bashrc,
        )
    network, package, installer = build_runners(config, dry_run=dry_run, sleep=sleep)
    return InstallContext(
        config=config,
        user=user,
        manifest=manifest,
        network=network,
        package=package,
        installer=installer,
        shellrc=ShellBlockEditor(owner_uid=user.uid, owner_gid=user.gid, dry_run=dry_run),
        dry_run=dry_run,
    )
