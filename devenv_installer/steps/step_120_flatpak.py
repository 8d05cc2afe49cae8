from __future__ import annotations

import logging

from ..context import InstallContext
from ..lib.pkg import command_exists, dnf_install, flatpak_add_remote, flatpak_has_app, flatpak_install
from .base import InstallStep

logger = logging.getLogger(__name__)


class FlatpakStep(InstallStep):
    step_id = "120_flatpak"
    label = "Installing Flatpak and Obsidian"
    group = "flatpak"

    def run(self, ctx: InstallContext) -> int:
        tools = self.tools(ctx)
        remote = tools.text("remote_name", "flathub")

        if command_exists("flatpak"):
            logger.info("Flatpak already installed")
        else:
            dnf_install(ctx.package, self.packages(ctx)).raise_for_failure("dnf install flatpak")

        flatpak_add_remote(ctx.package, remote, tools.text("remote_url")).raise_for_failure(f"add {remote} remote")

        for app_id in tools.strings("apps"):
            if flatpak_has_app(app_id, dry_run=ctx.dry_run):
                logger.info("%s already installed", app_id)
                continue
            flatpak_install(ctx.package, remote, app_id).raise_for_failure(f"flatpak install {app_id}")
        return 0
