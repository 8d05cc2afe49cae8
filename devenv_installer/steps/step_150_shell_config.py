from __future__ import annotations

import logging

from ..context import InstallContext
from ..lib.shellrc import BlockResult
from .base import InstallStep

logger = logging.getLogger(__name__)

BLOCK_ID = "dev-aliases"


class ShellConfigStep(InstallStep):
    step_id = "150_shell_config"
    label = "Configuring shell"
    group = "shell_config"

    def run(self, ctx: InstallContext) -> int:
        tools = self.tools(ctx)
        block = tools.text("aliases_block")

        if ctx.user.is_root:
            logger.info("Skipping shell configuration for root. Add this to your user's ~/.bashrc:\n%s", block)
            bun = ctx.manifest.group("bun").text("path_block")
            if bun:
                logger.info("And for Bun:\n%s", bun)
            return 0

        res = ctx.shellrc.append_block_if_missing(ctx.user.bashrc, BLOCK_ID, block)
        if res is BlockResult.FAILED:
            return 1
        if res is BlockResult.APPLIED:
            logger.info("Run `source ~/.bashrc` to pick up the new aliases")
        return 0
