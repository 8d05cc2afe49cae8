from __future__ import annotations

from ..context import InstallContext
from ..lib.pkg import dnf_upgrade
from ..pipeline import Criticality
from .base import InstallStep


class SystemUpdateStep(InstallStep):
    step_id = "10_system_update"
    label = "Updating package lists"
    criticality = Criticality.CRITICAL

    def run(self, ctx: InstallContext) -> int:
        dnf_upgrade(ctx.package).raise_for_failure("dnf upgrade")
        return 0
