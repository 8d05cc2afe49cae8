from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

logger = logging.getLogger(__name__)

TIMEOUT_EXIT_CODE = 124
NOT_FOUND_EXIT_CODE = 127
KILL_GRACE_S = 5.0


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return "\n".join(s for s in (self.stdout, self.stderr) if s)


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    timeout: float | None = None,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - Captures stdout/stderr so callers can classify failures.
    - On timeout the child gets SIGTERM, then SIGKILL after KILL_GRACE_S,
      and the result carries TIMEOUT_EXIT_CODE.
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    logger.info("CMD %s", fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    try:
        p = subprocess.Popen(
            argv_list,
            stdin=subprocess.PIPE if input_text is not None else subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
        )
    except FileNotFoundError as e:
        if check:
            raise RuntimeError(f"Command not found: {argv_list[0]}") from e
        return CmdResult(argv=argv_list, returncode=NOT_FOUND_EXIT_CODE, stdout="", stderr=str(e))

    timed_out = False
    try:
        stdout, stderr = p.communicate(input=input_text, timeout=timeout)
        returncode = p.returncode
    except subprocess.TimeoutExpired:
        timed_out = True
        logger.debug("Timeout after %ss, terminating pid %s", timeout, p.pid)
        p.terminate()
        try:
            stdout, stderr = p.communicate(timeout=KILL_GRACE_S)
        except subprocess.TimeoutExpired:
            p.kill()
            stdout, stderr = p.communicate()
        returncode = TIMEOUT_EXIT_CODE

    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    if check and returncode != 0:
        raise RuntimeError(f"Command failed ({returncode}): {fmt_argv(argv_list)}\n{stderr}")

    return CmdResult(
        argv=argv_list,
        returncode=returncode,
        stdout=stdout or "",
        stderr=stderr or "",
        timed_out=timed_out,
    )
