from __future__ import annotations

# sysexits.h values where one fits
EX_DATAERR = 65
EX_NOUSER = 67
EX_CONFIG = 78


class InstallerError(RuntimeError):
    """Base error; carries the exit code a failing step reports."""

    exit_code = 1

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(InstallerError):
    exit_code = EX_CONFIG


class ValidationError(InstallerError):
    """A downloaded artifact is empty, for the wrong architecture or malformed.

    Never retried.
    """

    exit_code = EX_DATAERR


class UserResolutionError(InstallerError):
    exit_code = EX_NOUSER


class StepFailed(InstallerError):
    pass
