from __future__ import annotations

import enum
import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Set

logger = logging.getLogger(__name__)


class BlockResult(enum.Enum):
    APPLIED = "applied"
    PRESENT = "present"
    SKIPPED = "skipped"
    FAILED = "failed"

    @property
    def ok(self) -> bool:
        return self is not BlockResult.FAILED


def start_marker(block_id: str) -> str:
    return f"# >>> START [{block_id}] >>>"


def end_marker(block_id: str) -> str:
    return f"# <<< END [{block_id}] <<<"


def render_block(block_id: str, content: str) -> str:
    body = content.rstrip("\n")
    return f"\n{start_marker(block_id)}\n{body}\n{end_marker(block_id)}\n"


class ShellBlockEditor:
    """Appends marked blocks to shell startup files, at most once per block id.

    Only the start marker is looked for; an existing block is never
    rewritten, even when the new content differs.

    A file that already existed is backed up once per editor (one editor per
    run) before the first write that changes it. The backup only counts once
    that write succeeded; files the editor created itself are not backed up.
    """

    def __init__(
        self,
        *,
        owner_uid: Optional[int] = None,
        owner_gid: Optional[int] = None,
        dry_run: bool = False,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.owner_uid = owner_uid
        self.owner_gid = owner_gid
        self.dry_run = dry_run
        self._now = now
        self._backed_up: Set[Path] = set()
        self._created: Set[Path] = set()

    @property
    def backed_up(self) -> Set[Path]:
        return set(self._backed_up)

    def append_block_if_missing(self, path: str | Path, block_id: str, content: str) -> BlockResult:
        p = Path(path)
        marker = start_marker(block_id)

        if p.exists() and not p.is_file():
            logger.error("%s exists but is not a regular file; cannot add block %s", p, block_id)
            return BlockResult.FAILED

        if not p.exists():
            parent = p.parent
            if not parent.is_dir() or not os.access(parent, os.W_OK):
                logger.warning("Cannot create %s (directory missing or not writable); skipping block %s", p, block_id)
                return BlockResult.SKIPPED
            if self.dry_run:
                logger.info("Would create %s and add block %s", p, block_id)
                return BlockResult.APPLIED
            try:
                p.touch()
            except OSError as e:
                logger.warning("Cannot create %s: %s; skipping block %s", p, e, block_id)
                return BlockResult.SKIPPED
            self._chown(p)
            self._created.add(p.resolve())
            logger.info("Created %s", p)
        elif not os.access(p, os.W_OK):
            logger.warning("%s is not writable; skipping block %s", p, block_id)
            return BlockResult.SKIPPED

        try:
            current = p.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Cannot read %s: %s; skipping block %s", p, e, block_id)
            return BlockResult.SKIPPED

        if marker in current:
            logger.info("Block %s already present in %s", block_id, p)
            return BlockResult.PRESENT

        if self.dry_run:
            logger.info("Would add block %s to %s", block_id, p)
            return BlockResult.APPLIED

        try:
            backup = self._backup_if_needed(p)
            with p.open("a", encoding="utf-8") as f:
                f.write(render_block(block_id, content))
        except OSError as e:
            logger.warning("Failed to write block %s to %s: %s", block_id, p, e)
            return BlockResult.SKIPPED
        if backup is not None:
            self._backed_up.add(p.resolve())

        logger.info("Added block %s to %s", block_id, p)
        return BlockResult.APPLIED

    def _backup_if_needed(self, p: Path) -> Optional[Path]:
        key = p.resolve()
        if key in self._backed_up or key in self._created:
            return None
        backup = p.with_name(f"{p.name}.backup.{self._now().strftime('%Y%m%d_%H%M%S')}")
        shutil.copy2(p, backup)
        self._chown(backup)
        logger.info("Backed up %s -> %s", p, backup)
        return backup

    def _chown(self, p: Path) -> None:
        if self.owner_uid is None or os.geteuid() != 0:
            return
        gid = self.owner_gid if self.owner_gid is not None else -1
        try:
            os.chown(p, self.owner_uid, gid)
        except OSError as e:
            logger.warning("Could not set owner of %s: %s", p, e)
