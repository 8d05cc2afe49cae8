from __future__ import annotations

from ..context import InstallContext
from .base import PackageGroupStep


class NodejsStep(PackageGroupStep):
    step_id = "90_nodejs"
    label = "Installing Node.js"
    group = "nodejs"

    def run(self, ctx: InstallContext) -> int:
        super().run(ctx)
        packages = self.tools(ctx).strings("npm_global")
        if packages:
            ctx.installer.run(["npm", "install", "-g", *packages]).raise_for_failure("npm install -g")
        return 0
