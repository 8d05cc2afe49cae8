from __future__ import annotations

from ..pipeline import Criticality
from .base import PackageGroupStep


class BuildToolsStep(PackageGroupStep):
    step_id = "20_build_tools"
    label = "Installing build tools"
    criticality = Criticality.CRITICAL
    group = "build_tools"
