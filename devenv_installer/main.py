from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional, Sequence

from .context import InstallContext, build_context
from .errors import InstallerError
from .install_config import load_install_config
from .lib.manifests import load_manifest
from .lib.users import resolve_user_context
from .logging_utils import configure_logging
from .pipeline import PipelineResult, Step, run_pipeline, select_steps
from .steps import ALL_STEPS, build_registry

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def log_summary(result: PipelineResult, ctx: InstallContext) -> None:
    lines = ["", "=== Installation Complete ===" if result.exit_code == 0 else "=== Installation Aborted ==="]

    installed = [s.summary for s in result.completed if s.summary]
    if installed:
        lines.append("Installed tools:")
        lines.extend(f"  {s}" for s in installed)

    if result.failed_optional:
        lines.append("Skipped after failure (optional):")
        lines.extend(f"  {s.label}" for s in result.failed_optional)

    if result.failed_critical is not None:
        lines.append(f"Aborted at: {result.failed_critical.label} (exit {result.exit_code})")
    elif not ctx.user.is_root:
        lines.append(f"Restart your shell or run 'source {ctx.user.bashrc}' to use the new tools.")

    logger.info("\n".join(lines))


def run(
    *,
    log_path: Optional[str] = None,
    manifest_path: Optional[str] = None,
    only: Sequence[str] = (),
    skip: Sequence[str] = (),
    dry_run: bool = False,
    verbose: bool = False,
) -> int:
    """Run the installer; returns the process exit code."""

    config = load_install_config()
    actual = configure_logging(
        log_path=log_path or config.log_path,
        level=logging.DEBUG if verbose else logging.INFO,
    )
    logger.info("=== Fedora Development Environment Installation ===")
    logger.info("Log file: %s", actual or "(console only)")
    for policy in (config.network, config.package, config.installer):
        logger.debug(
            "Retry policy %s: attempts=%d timeout=%gs backoff=%s",
            policy.name,
            policy.max_attempts,
            policy.timeout_per_attempt,
            ",".join(f"{d:g}" for d in policy.backoff_schedule),
        )

    if os.geteuid() != 0 and not dry_run:
        logger.error("Please run as root or with sudo")
        return 1

    user = resolve_user_context()
    manifest = load_manifest(manifest_path, required={s.group for s in ALL_STEPS if s.group})
    ctx = build_context(config=config, user=user, manifest=manifest, dry_run=dry_run)

    steps: List[Step] = select_steps(build_registry(ctx), only=only, skip=skip)
    result = run_pipeline(steps)
    log_summary(result, ctx)
    return result.exit_code


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="devenv-installer", description="Provision a Fedora development workstation")
    p.add_argument("--log", default=None, help="Path to installer log (default: $DEVENV_LOG_PATH or /var/log)")
    p.add_argument("--manifest", default=None, help="Tool catalog YAML (default: bundled manifests/tools.yaml)")
    p.add_argument("--only", action="append", default=[], metavar="STEP_ID", help="Run only this step (repeatable)")
    p.add_argument("--skip", action="append", default=[], metavar="STEP_ID", help="Skip this step (repeatable)")
    p.add_argument("--dry-run", action="store_true", help="Log commands without running them")
    p.add_argument("--verbose", action="store_true", help="Debug logging, including command output")
    p.add_argument("--list-steps", action="store_true", help="Print the step registry and exit")

    args = p.parse_args(argv)

    if args.list_steps:
        for s in ALL_STEPS:
            print(f"{s.step_id:<20} {s.criticality.value:<9} {s.label}")
        return 0

    known = {s.step_id for s in ALL_STEPS}
    unknown = sorted((set(args.only) | set(args.skip)) - known)
    if unknown:
        p.error(f"unknown step id(s): {', '.join(unknown)} (see --list-steps)")

    try:
        return run(
            log_path=args.log,
            manifest_path=args.manifest,
            only=args.only,
            skip=args.skip,
            dry_run=bool(args.dry_run),
            verbose=bool(args.verbose),
        )
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return EXIT_INTERRUPTED
    except InstallerError as e:
        # Raised outside any step: configuration or user resolution.
        if not logging.getLogger().handlers:
            configure_logging(log_path=None)
        logger.error("%s", e)
        return e.exit_code
    except Exception:
        if not logging.getLogger().handlers:
            configure_logging(log_path=None)
        logger.exception("Installer failed with an unexpected error")
        return 1
