from __future__ import annotations

import json
import logging
import platform
import re
import tarfile
from pathlib import Path
from typing import Optional, Pattern, Union

from ..errors import ValidationError
from .command import CmdResult
from .runners import CommandRunner

logger = logging.getLogger(__name__)

CURL = ["curl", "--proto", "=https", "--tlsv1.2", "-fsSL"]

SHEBANG = re.compile(r"\A#!\s*/")
VERSION = re.compile(r"^\d+(\.\d+)*$")

# platform.machine() -> release asset arch, as used by GitHub release names
RELEASE_ARCH = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "armv6",
    "armv6l": "armv6",
}


def _text_validator(pattern: Optional[Pattern[str]]):
    def check(result: CmdResult) -> Optional[str]:
        if not result.stdout.strip():
            return "empty response"
        if pattern is not None and not pattern.search(result.stdout):
            return f"response does not match {pattern.pattern!r}"
        return None

    return check


def fetch_text(runner: CommandRunner, url: str, *, pattern: Union[str, Pattern[str], None] = None) -> str:
    """GET url through the network runner and return the body.

    Raises ValidationError when the body is empty or does not match pattern.
    """

    rx = re.compile(pattern) if isinstance(pattern, str) else pattern
    outcome = runner.run([*CURL, url], validate=_text_validator(rx))
    outcome.raise_for_failure(f"fetch {url}")
    return outcome.stdout


def download(runner: CommandRunner, url: str, dest: Path) -> Path:
    def check(_result: CmdResult) -> Optional[str]:
        if not dest.is_file() or dest.stat().st_size == 0:
            return f"downloaded file {dest} is empty"
        return None

    outcome = runner.run([*CURL, "-o", str(dest), url], validate=check)
    outcome.raise_for_failure(f"download {url}")
    return dest


def latest_release_version(runner: CommandRunner, repo: str) -> str:
    """Version of the latest GitHub release of `repo` ("owner/name"), without the leading v."""

    url = f"https://api.github.com/repos/{repo}/releases/latest"
    body = fetch_text(runner, url, pattern=r'"tag_name"')
    try:
        tag = json.loads(body).get("tag_name") or ""
    except (ValueError, AttributeError) as e:
        raise ValidationError(f"release metadata from {url} is not a JSON object") from e

    version = str(tag).strip().lstrip("v")
    if not VERSION.match(version):
        raise ValidationError(f"unexpected release tag {tag!r} from {url}")
    logger.info("Latest %s release: %s", repo, version)
    return version


def release_arch(machine: Optional[str] = None) -> str:
    m = (machine or platform.machine()).lower()
    arch = RELEASE_ARCH.get(m)
    if not arch:
        raise ValidationError(f"unsupported architecture for release download: {m}")
    return arch


def check_tarball(path: Path, member: str) -> None:
    """Raise ValidationError unless path is a tar archive containing member."""

    if not tarfile.is_tarfile(path):
        raise ValidationError(f"{path} is not a tar archive")
    with tarfile.open(path) as tf:
        names = tf.getnames()
    if member not in names:
        raise ValidationError(f"{path} does not contain {member}")
