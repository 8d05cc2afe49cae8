from __future__ import annotations

from .base import PackageGroupStep


class TerminalUtilsStep(PackageGroupStep):
    step_id = "30_terminal_utils"
    label = "Installing terminal utilities"
    group = "terminal_utils"
