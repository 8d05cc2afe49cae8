from __future__ import annotations

import logging
from typing import List

from ..context import InstallContext
from ..errors import ConfigError
from ..lib.manifests import ToolGroup
from ..lib.pkg import dnf_install
from ..pipeline import Criticality

logger = logging.getLogger(__name__)


class InstallStep:
    """Base for registry entries; subclasses set the class attributes."""

    step_id: str = ""
    label: str = ""
    criticality: Criticality = Criticality.OPTIONAL
    # Name of the tool group in manifests/tools.yaml, if any.
    group: str | None = None

    def tools(self, ctx: InstallContext) -> ToolGroup:
        assert self.group is not None
        return ctx.manifest.group(self.group)

    def packages(self, ctx: InstallContext) -> List[str]:
        packages = self.tools(ctx).packages
        if not packages:
            raise ConfigError(f"tool group {self.group}: packages must not be empty")
        return packages

    def run(self, ctx: InstallContext) -> int:
        raise NotImplementedError


class PackageGroupStep(InstallStep):
    """Installs the group's `packages` with dnf."""

    def run(self, ctx: InstallContext) -> int:
        packages = self.packages(ctx)
        dnf_install(ctx.package, packages).raise_for_failure(f"dnf install {' '.join(packages)}")
        logger.info("Installed: %s", ", ".join(packages))
        return 0
