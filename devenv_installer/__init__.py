"""Fedora development workstation installer.

Core design goals:
- Ordered steps, each critical or optional
- Retries with deterministic backoff for flaky external commands
- Idempotent shell configuration edits
- Centralized logging
"""

__all__ = []

__version__ = "1.0.0"
