from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence

from .errors import InstallerError

logger = logging.getLogger(__name__)


class Criticality(enum.Enum):
    CRITICAL = "critical"
    OPTIONAL = "optional"


@dataclass(frozen=True)
class Step:
    """A single named unit of work. action() returns 0 on success."""

    step_id: str
    label: str
    criticality: Criticality
    action: Callable[[], int]
    summary: str = ""

    @property
    def critical(self) -> bool:
        return self.criticality is Criticality.CRITICAL


@dataclass
class PipelineResult:
    exit_code: int = 0
    completed: List[Step] = field(default_factory=list)
    failed_optional: List[Step] = field(default_factory=list)
    failed_critical: Optional[Step] = None


def _invoke(step: Step) -> int:
    try:
        rc = step.action()
    except InstallerError as e:
        logger.error("%s: %s", step.label, e)
        return e.exit_code or 1
    except Exception:
        if step.critical:
            logger.error("Unexpected error in step %s (%s)", step.step_id, step.label)
            raise
        logger.exception("Unexpected error in step %s (%s)", step.step_id, step.label)
        return 1
    return int(rc or 0)


def run_step(step: Step, result: Optional[PipelineResult] = None) -> int:
    """Run one step; returns 0 unless a critical step failed.

    Failures of optional steps never raise out of here, whatever the cause.
    An unexpected exception from a critical step propagates to the caller.
    When `result` is given the outcome is recorded there.
    """

    logger.info("START %s (%s)", step.label, step.criticality.value)
    rc = _invoke(step)

    if rc == 0:
        logger.info("DONE %s", step.label)
        if result is not None:
            result.completed.append(step)
        return 0

    if step.critical:
        logger.error("FAILED %s (critical, exit %d); aborting", step.label, rc)
        if result is not None:
            result.exit_code = rc
            result.failed_critical = step
        return rc

    logger.warning("FAILED %s (optional, exit %d); continuing", step.label, rc)
    if result is not None:
        result.failed_optional.append(step)
    return 0


def select_steps(
    steps: Sequence[Step],
    *,
    only: Iterable[str] = (),
    skip: Iterable[str] = (),
) -> List[Step]:
    """Filter by step id without reordering."""

    only_set = set(only)
    skip_set = set(skip)
    known = {s.step_id for s in steps}
    unknown = (only_set | skip_set) - known
    if unknown:
        raise ValueError(f"Unknown step id(s): {', '.join(sorted(unknown))}")
    return [s for s in steps if (not only_set or s.step_id in only_set) and s.step_id not in skip_set]


def run_pipeline(steps: Sequence[Step]) -> PipelineResult:
    """Run steps strictly in order; stop at the first critical failure."""

    result = PipelineResult()
    total = len(steps)

    for idx, step in enumerate(steps, start=1):
        logger.info("[%d/%d] %s", idx, total, step.label)
        if run_step(step, result) != 0:
            break

    return result
