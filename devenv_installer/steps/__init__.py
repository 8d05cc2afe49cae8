from __future__ import annotations

from functools import partial
from typing import List

from ..context import InstallContext
from ..pipeline import Step
from .base import InstallStep
from .step_10_system_update import SystemUpdateStep
from .step_20_build_tools import BuildToolsStep
from .step_30_terminal_utils import TerminalUtilsStep
from .step_40_editors import EditorsStep
from .step_50_git_tools import GitToolsStep
from .step_60_github_cli import GithubCliStep
from .step_70_lazygit import LazygitStep
from .step_80_python_tools import PythonToolsStep
from .step_90_nodejs import NodejsStep
from .step_100_bun import BunStep
from .step_110_rust import RustStep
from .step_120_flatpak import FlatpakStep
from .step_130_snap import SnapStep
from .step_140_yazi import YaziStep
from .step_150_shell_config import ShellConfigStep

# Order is a hand-maintained dependency order: compilers before cargo,
# curl/tar before downloads, eza/bat/zoxide before the aliases that use them.
ALL_STEPS: List[InstallStep] = [
    SystemUpdateStep(),
    BuildToolsStep(),
    TerminalUtilsStep(),
    EditorsStep(),
    GitToolsStep(),
    GithubCliStep(),
    LazygitStep(),
    PythonToolsStep(),
    NodejsStep(),
    BunStep(),
    RustStep(),
    FlatpakStep(),
    SnapStep(),
    YaziStep(),
    ShellConfigStep(),
]


def build_registry(ctx: InstallContext) -> List[Step]:
    steps: List[Step] = []
    for s in ALL_STEPS:
        summary = ctx.manifest.group(s.group).summary if s.group else ""
        steps.append(
            Step(
                step_id=s.step_id,
                label=s.label,
                criticality=s.criticality,
                action=partial(s.run, ctx),
                summary=summary,
            )
        )
    return steps


__all__ = [
    "ALL_STEPS",
    "build_registry",
    "SystemUpdateStep",
    "BuildToolsStep",
    "TerminalUtilsStep",
    "EditorsStep",
    "GitToolsStep",
    "GithubCliStep",
    "LazygitStep",
    "PythonToolsStep",
    "NodejsStep",
    "BunStep",
    "RustStep",
    "FlatpakStep",
    "SnapStep",
    "YaziStep",
    "ShellConfigStep",
]
