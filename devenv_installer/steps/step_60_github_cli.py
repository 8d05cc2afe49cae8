from __future__ import annotations

import logging
from pathlib import Path

from ..context import InstallContext
from ..lib.env import PATHS
from ..lib.pkg import dnf_add_repo, dnf_install
from .base import InstallStep

logger = logging.getLogger(__name__)


class GithubCliStep(InstallStep):
    step_id = "60_github_cli"
    label = "Installing GitHub CLI"
    group = "github_cli"

    def run(self, ctx: InstallContext) -> int:
        tools = self.tools(ctx)

        prereqs = tools.strings("prerequisites")
        if prereqs:
            dnf_install(ctx.package, prereqs).raise_for_failure("dnf install " + " ".join(prereqs))

        if Path(PATHS.gh_repo_file).exists():
            logger.info("gh repository already configured (%s)", PATHS.gh_repo_file)
        else:
            repo_file = tools.text("repo_file")
            dnf_add_repo(ctx.package, repo_file).raise_for_failure(f"add repo {repo_file}")

        dnf_install(ctx.package, self.packages(ctx)).raise_for_failure("dnf install gh")
        return 0
