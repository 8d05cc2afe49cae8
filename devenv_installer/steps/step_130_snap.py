from __future__ import annotations

import logging
import os
from pathlib import Path

from ..context import InstallContext
from ..lib.env import PATHS
from ..lib.pkg import command_exists, dnf_install
from .base import InstallStep

logger = logging.getLogger(__name__)


def link_snap_dir(link: str = PATHS.snap_link, target: str = PATHS.snap_target, *, dry_run: bool = False) -> None:
    """Classic snap support needs /snap; best effort."""
    p = Path(link)
    if p.is_symlink() or p.exists():
        return
    if dry_run:
        logger.info("Would link %s -> %s", link, target)
        return
    try:
        os.symlink(target, link)
    except OSError as e:
        logger.warning("Could not link %s -> %s: %s", link, target, e)


class SnapStep(InstallStep):
    step_id = "130_snap"
    label = "Installing Snap"
    group = "snap"

    def run(self, ctx: InstallContext) -> int:
        if command_exists("snap"):
            logger.info("Snap already installed")
            return 0

        dnf_install(ctx.package, self.packages(ctx)).raise_for_failure("dnf install snapd")
        ctx.package.run(["systemctl", "enable", "--now", "snapd.socket"]).raise_for_failure("enable snapd.socket")
        link_snap_dir(dry_run=ctx.dry_run)
        return 0
