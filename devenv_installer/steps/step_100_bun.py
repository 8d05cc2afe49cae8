from __future__ import annotations

import logging

from ..context import InstallContext
from ..lib.net import SHEBANG, fetch_text
from ..lib.shellrc import BlockResult
from .base import InstallStep

logger = logging.getLogger(__name__)

BLOCK_ID = "bun-path"


class BunStep(InstallStep):
    step_id = "100_bun"
    label = "Installing Bun"
    group = "bun"

    def run(self, ctx: InstallContext) -> int:
        tools = self.tools(ctx)
        user = ctx.target_user

        if (ctx.user.home / ".bun" / "bin" / "bun").exists():
            logger.info("bun already installed in %s; skipping installer", ctx.user.home)
        else:
            script = fetch_text(ctx.network, tools.text("installer_url"), pattern=SHEBANG)
            ctx.installer.run(["bash", "-s"], user=user, input_text=script).raise_for_failure("bun installer")

        if ctx.user.is_root:
            logger.info("Target user is root; not editing a user .bashrc for bun")
            return 0

        res = ctx.shellrc.append_block_if_missing(ctx.user.bashrc, BLOCK_ID, tools.text("path_block"))
        return 1 if res is BlockResult.FAILED else 0
