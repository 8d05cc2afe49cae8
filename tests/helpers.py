# tests/helpers.py
from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from devenv_installer.install_config import RetryPolicy
from devenv_installer.lib.command import CmdResult
from devenv_installer.lib.retry import Outcome, OutcomeKind


def cmd_result(returncode: int = 0, stdout: str = "", stderr: str = "", timed_out: bool = False) -> CmdResult:
    return CmdResult(argv=["cmd"], returncode=returncode, stdout=stdout, stderr=stderr, timed_out=timed_out)


class ScriptedCommand:
    """Stands in for run_cmd: returns queued results, repeating the last one."""

    def __init__(self, results: Sequence[CmdResult]) -> None:
        self.results = list(results)
        self.calls: List[dict] = []

    def __call__(self, argv, **kwargs) -> CmdResult:
        self.calls.append({"argv": list(argv), **kwargs})
        idx = min(len(self.calls) - 1, len(self.results) - 1)
        return self.results[idx]


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeRunner:
    """Records CommandRunner.run() calls; `respond` decides the outcome."""

    def __init__(self, name: str, respond: Optional[Callable[[List[str]], Outcome]] = None) -> None:
        self.name = name
        self.calls: List[dict] = []
        self._respond = respond or (lambda argv: ok_outcome())

    def run(self, argv, *, user=None, env=None, cwd=None, input_text=None, validate=None) -> Outcome:
        self.calls.append({"argv": list(argv), "user": user, "input_text": input_text})
        return self._respond(list(argv))

    @property
    def argvs(self) -> List[List[str]]:
        return [c["argv"] for c in self.calls]


def ok_outcome(stdout: str = "") -> Outcome:
    return Outcome(OutcomeKind.SUCCESS, 0, 1, cmd_result(0, stdout=stdout))


def failed_outcome(code: int = 1) -> Outcome:
    return Outcome(OutcomeKind.EXHAUSTED, code, 3, cmd_result(code))


def policy(max_attempts: int = 3, backoff=(5.0, 15.0, 30.0), timeout: float = 10.0, name: str = "test") -> RetryPolicy:
    return RetryPolicy(name=name, max_attempts=max_attempts, timeout_per_attempt=timeout, backoff_schedule=tuple(backoff))
