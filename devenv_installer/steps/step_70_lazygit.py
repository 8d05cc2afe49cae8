from __future__ import annotations

import logging
import os
import shutil
import tarfile
import tempfile
from pathlib import Path

from ..context import InstallContext
from ..errors import StepFailed, ValidationError
from ..lib.env import PATHS
from ..lib.net import check_tarball, download, latest_release_version, release_arch
from ..lib.pkg import command_exists
from .base import InstallStep

logger = logging.getLogger(__name__)

BINARY = "lazygit"


def asset_url(repo: str, version: str, arch: str) -> str:
    return (
        f"https://github.com/{repo}/releases/download/v{version}/"
        f"lazygit_{version}_Linux_{arch}.tar.gz"
    )


def install_binary(archive: Path, member: str, dest_dir: str) -> Path:
    dest = Path(dest_dir) / member
    with tarfile.open(archive) as tf:
        src = tf.extractfile(member)
        if src is None:
            raise ValidationError(f"{member} in {archive} is not a regular file")
        try:
            with src, open(dest, "wb") as out:
                shutil.copyfileobj(src, out)
            os.chmod(dest, 0o755)
        except OSError as e:
            raise StepFailed(f"Cannot install {member} to {dest}: {e}") from e
    return dest


class LazygitStep(InstallStep):
    step_id = "70_lazygit"
    label = "Installing Lazygit"
    group = "lazygit"

    def run(self, ctx: InstallContext) -> int:
        if command_exists(BINARY):
            logger.info("lazygit already installed; skipping")
            return 0

        repo = self.tools(ctx).text("github_repo", "jesseduffield/lazygit")
        arch = release_arch()

        if ctx.dry_run:
            logger.info("Would download the latest %s release (%s) into %s", repo, arch, PATHS.local_bin)
            return 0

        version = latest_release_version(ctx.network, repo)
        url = asset_url(repo, version, arch)

        with tempfile.TemporaryDirectory(prefix="devenv-lazygit-") as tmp:
            archive = download(ctx.network, url, Path(tmp) / "lazygit.tar.gz")
            check_tarball(archive, BINARY)
            dest = install_binary(archive, BINARY, PATHS.local_bin)

        logger.info("Installed lazygit %s to %s", version, dest)
        return 0
