from __future__ import annotations

import logging

from ..context import InstallContext
from ..lib.net import SHEBANG, fetch_text
from .base import InstallStep

logger = logging.getLogger(__name__)


class RustStep(InstallStep):
    step_id = "110_rust"
    label = "Installing Rust and Cargo tools"
    group = "rust"

    def run(self, ctx: InstallContext) -> int:
        tools = self.tools(ctx)
        user = ctx.target_user
        if user is None:
            logger.warning("Installing Rust for root; running with sudo as a normal user is recommended")

        cargo_bin = ctx.user.home / ".cargo" / "bin"
        if (cargo_bin / "rustup").exists():
            logger.info("rustup already installed in %s; skipping installer", cargo_bin)
        else:
            script = fetch_text(ctx.network, tools.text("installer_url"), pattern=SHEBANG)
            argv = ["sh", "-s", "--", *tools.strings("installer_args")]
            ctx.installer.run(argv, user=user, input_text=script).raise_for_failure("rustup installer")

        cargo = str(cargo_bin / "cargo")
        for crate in tools.strings("cargo"):
            ctx.installer.run([cargo, "install", crate], user=user).raise_for_failure(f"cargo install {crate}")
        return 0
