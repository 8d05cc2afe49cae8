from __future__ import annotations

import logging
import os
import pwd
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from ..errors import UserResolutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserContext:
    username: str
    home: Path
    resolved: bool
    uid: Optional[int] = None
    gid: Optional[int] = None

    @property
    def is_root(self) -> bool:
        return self.username == "root" or self.uid == 0

    @property
    def bashrc(self) -> Path:
        return self.home / ".bashrc"


def _candidates(environ: Mapping[str, str]) -> List[str]:
    out: List[str] = []
    for name in (environ.get("SUDO_USER"), environ.get("USER"), environ.get("LOGNAME"), "root"):
        name = (name or "").strip()
        if name and name not in out:
            out.append(name)
    return out


def resolve_user_context(
    environ: Optional[Mapping[str, str]] = None,
    *,
    getpwnam: Callable[[str], pwd.struct_passwd] = pwd.getpwnam,
) -> UserContext:
    """Work out which non-privileged user the workstation is being set up for.

    Tries the sudo-invoking user, then the session user, then root, and takes
    the first account whose home directory exists. When no account record
    fits, falls back to USER/HOME from the environment and marks the context
    unresolved so later steps still have a home to act on.
    """

    env = os.environ if environ is None else environ

    for name in _candidates(env):
        try:
            rec = getpwnam(name)
        except KeyError:
            logger.debug("No account record for %s", name)
            continue
        home = Path(rec.pw_dir)
        if home.is_dir():
            logger.info("Target user: %s (home %s)", name, home)
            return UserContext(username=name, home=home, resolved=True, uid=rec.pw_uid, gid=rec.pw_gid)
        logger.debug("Home directory of %s does not exist: %s", name, home)

    name = (env.get("SUDO_USER") or env.get("USER") or env.get("LOGNAME") or "").strip()
    home_raw = (env.get("HOME") or "").strip()
    if not name or not home_raw:
        raise UserResolutionError("Cannot determine target user: no account record and no USER/HOME in environment")

    logger.warning("Could not resolve a user account; falling back to environment (user=%s, home=%s)", name, home_raw)
    return UserContext(username=name, home=Path(home_raw), resolved=False)
