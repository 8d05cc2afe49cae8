from __future__ import annotations

import logging

from ..context import InstallContext
from ..pipeline import Criticality
from .base import PackageGroupStep

logger = logging.getLogger(__name__)


class PythonToolsStep(PackageGroupStep):
    step_id = "80_python_tools"
    label = "Installing Python, pipx and Astral uv"
    criticality = Criticality.CRITICAL
    group = "python_tools"

    def run(self, ctx: InstallContext) -> int:
        super().run(ctx)

        user = ctx.target_user
        for tool in self.tools(ctx).strings("pipx"):
            # pipx exits 0 when the tool is already installed.
            ctx.installer.run(["pipx", "install", tool], user=user).raise_for_failure(f"pipx install {tool}")

        ctx.installer.run(["pipx", "ensurepath"], user=user).raise_for_failure("pipx ensurepath")
        logger.info("pipx tools installed for %s", user or "root")
        return 0
