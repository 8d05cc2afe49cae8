from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence

from ..errors import EX_DATAERR, StepFailed, ValidationError
from ..install_config import RetryPolicy
from .command import CmdResult, fmt_argv, run_cmd

logger = logging.getLogger(__name__)

# Returns a human description of a failed attempt, e.g. "lock contention".
FailureClassifier = Callable[[CmdResult], str]
# Returns None when the output is acceptable, else the reason it is not.
OutputValidator = Callable[[CmdResult], Optional[str]]


class OutcomeKind(enum.Enum):
    SUCCESS = "success"
    TIMED_OUT = "timed_out"
    VALIDATION_FAILED = "validation_failed"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    exit_code: int
    attempts: int
    result: Optional[CmdResult] = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def stdout(self) -> str:
        return self.result.stdout if self.result else ""

    def raise_for_failure(self, what: str) -> "Outcome":
        if self.kind is OutcomeKind.VALIDATION_FAILED:
            raise ValidationError(f"{what}: {self.reason}")
        if not self.ok:
            raise StepFailed(f"{what} failed ({self.kind.value}, exit {self.exit_code})", exit_code=self.exit_code)
        return self


def generic_failure(result: CmdResult) -> str:
    if result.timed_out:
        return "timed out"
    return "command failed"


def execute(
    policy: RetryPolicy,
    argv: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    classify: FailureClassifier = generic_failure,
    validate: OutputValidator | None = None,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
    runner: Optional[Callable[..., CmdResult]] = None,
) -> Outcome:
    """Run argv up to policy.max_attempts times.

    Between failed attempt i and i+1 sleeps policy.delay_after(i); the last
    schedule entry repeats. No sleep follows the final attempt or a success.
    A validator rejection stops immediately: retrying cannot fix a bad
    artifact.
    """

    run = runner or run_cmd
    last: Optional[CmdResult] = None
    cmd = fmt_argv(argv)

    for attempt in range(1, policy.max_attempts + 1):
        last = run(
            argv,
            check=False,
            env=env,
            cwd=cwd,
            input_text=input_text,
            timeout=policy.timeout_per_attempt,
            dry_run=dry_run,
        )

        if last.returncode == 0:
            if validate is not None and not dry_run:
                reason = validate(last)
                if reason:
                    logger.error("Validation failed for %s: %s", cmd, reason)
                    return Outcome(OutcomeKind.VALIDATION_FAILED, EX_DATAERR, attempt, last, reason)
            return Outcome(OutcomeKind.SUCCESS, 0, attempt, last)

        if attempt < policy.max_attempts:
            delay = policy.delay_after(attempt)
            logger.warning(
                "Attempt %d/%d of %s: %s (exit %d); retrying in %gs",
                attempt,
                policy.max_attempts,
                cmd,
                classify(last),
                last.returncode,
                delay,
            )
            sleep(delay)

    assert last is not None
    logger.error(
        "Giving up on %s after %d attempt(s) [%s policy]: exit %d",
        cmd,
        policy.max_attempts,
        policy.name,
        last.returncode,
    )
    kind = OutcomeKind.TIMED_OUT if last.timed_out else OutcomeKind.EXHAUSTED
    return Outcome(kind, last.returncode, policy.max_attempts, last, classify(last))
