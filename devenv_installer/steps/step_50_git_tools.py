from __future__ import annotations

from ..context import InstallContext
from ..pipeline import Criticality
from .base import PackageGroupStep


class GitToolsStep(PackageGroupStep):
    step_id = "50_git_tools"
    label = "Installing Git tools"
    criticality = Criticality.CRITICAL
    group = "git_tools"

    def run(self, ctx: InstallContext) -> int:
        super().run(ctx)
        # System-wide so every user gets the LFS filters.
        ctx.package.run(["git", "lfs", "install", "--system"]).raise_for_failure("git lfs install")
        return 0
