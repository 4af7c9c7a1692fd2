"""Version lookup for signal-plan.

Release tooling may pin the version through ``PYTHON_SEMANTIC_RELEASE_VERSION``;
installed copies read their distribution metadata and source checkouts fall
back to the newest ``## vX.Y.Z`` heading of ``CHANGELOG.md``.
"""

import os
import re
from importlib import metadata
from pathlib import Path

from packaging.version import InvalidVersion, Version

DISTRIBUTION_NAME = "signal-plan"
RELEASE_OVERRIDE_ENV = "PYTHON_SEMANTIC_RELEASE_VERSION"

_CHANGELOG_HEADING = re.compile(r"^## v(?P<version>\d+\.\d+\.\d+)\b")


def _changelog_version() -> str:
    here = Path(__file__).resolve()
    for changelog in (here.parents[1] / "CHANGELOG.md", here.parents[2] / "CHANGELOG.md"):
        if not changelog.is_file():
            continue
        for line in changelog.read_text(encoding="utf-8").splitlines():
            match = _CHANGELOG_HEADING.match(line)
            if match:
                return match.group("version")

    raise RuntimeError(f"No release heading found for {DISTRIBUTION_NAME!r} in CHANGELOG.md")


def _resolve_raw_version() -> str:
    pinned = os.environ.get(RELEASE_OVERRIDE_ENV)
    if pinned:
        return pinned
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return _changelog_version()


def _load_version() -> str:
    raw_version = _resolve_raw_version()
    try:
        release = Version(raw_version).release
    except InvalidVersion as exc:
        raise RuntimeError(f"{DISTRIBUTION_NAME} version {raw_version!r} is not PEP 440") from exc

    if len(release) != 3:
        raise RuntimeError(
            f"{DISTRIBUTION_NAME} version {raw_version!r} must have exactly three "
            "release components"
        )
    return raw_version


__version__ = _load_version()

__all__ = ["__version__"]
