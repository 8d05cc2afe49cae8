from __future__ import annotations

import logging
import time
from typing import Callable, Mapping, Sequence

from ..install_config import InstallConfig, RetryPolicy
from .command import CmdResult
from .retry import Outcome, OutputValidator, execute, generic_failure

logger = logging.getLogger(__name__)

LOCK_MARKERS = (
    "could not get lock",
    "waiting for process with pid",
    "another copy is running",
    "failed to obtain the transaction lock",
    "database is locked",
    "lock table is out of available locker entries",
    "waiting for cache lock",
)

# Keep console forwarding of a failed command readable.
MAX_FORWARDED_LINES = 40


def as_user(argv: Sequence[str], user: str | None) -> list[str]:
    """Prefix argv so it runs as `user` with that user's HOME."""
    if not user or user == "root":
        return list(argv)
    return ["sudo", "-u", user, "-H", "--", *argv]


class CommandRunner:
    """Binds one RetryPolicy to the retry engine."""

    def __init__(
        self,
        name: str,
        policy: RetryPolicy,
        *,
        dry_run: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.name = name
        self.policy = policy
        self.dry_run = dry_run
        self._sleep = sleep

    def classify(self, result: CmdResult) -> str:
        return generic_failure(result)

    def run(
        self,
        argv: Sequence[str],
        *,
        user: str | None = None,
        env: Mapping[str, str] | None = None,
        cwd: str | None = None,
        input_text: str | None = None,
        validate: OutputValidator | None = None,
    ) -> Outcome:
        outcome = execute(
            self.policy,
            as_user(argv, user),
            env=env,
            cwd=cwd,
            input_text=input_text,
            classify=self.classify,
            validate=validate,
            dry_run=self.dry_run,
            sleep=self._sleep,
        )
        if not outcome.ok and outcome.result is not None:
            self._forward_output(outcome.result)
        return outcome

    def _forward_output(self, result: CmdResult) -> None:
        for stream, text in (("stdout", result.stdout), ("stderr", result.stderr)):
            lines = text.strip().splitlines()
            if not lines:
                continue
            if len(lines) > MAX_FORWARDED_LINES:
                lines = ["..."] + lines[-MAX_FORWARDED_LINES:]
            logger.error("[%s] last %s:\n%s", self.name, stream, "\n".join(lines))


class PackageRunner(CommandRunner):
    """Package-manager calls; calls out lock contention in retry warnings."""

    def classify(self, result: CmdResult) -> str:
        if is_lock_contention(result.output):
            return "package manager lock contention (another process holds the lock)"
        return generic_failure(result)


def is_lock_contention(output: str) -> bool:
    text = output.lower()
    return any(marker in text for marker in LOCK_MARKERS)


def build_runners(
    config: InstallConfig,
    *,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> tuple[CommandRunner, PackageRunner, CommandRunner]:
    """Return (network, package, installer) runners."""
    return (
        CommandRunner("network", config.network, dry_run=dry_run, sleep=sleep),
        PackageRunner("package", config.package, dry_run=dry_run, sleep=sleep),
        CommandRunner("installer", config.installer, dry_run=dry_run, sleep=sleep),
    )
