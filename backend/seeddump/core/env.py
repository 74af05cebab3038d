"""`.env` support for the seed dump job.

Only `KEY=value` assignments are read, optionally prefixed by `export` and
with the value wrapped in matching quotes. Variables already present in the
process environment win unless `override` is set.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Optional

ENV_FILE_VAR = "SEED_DUMP_ENV_FILE"

logger = logging.getLogger("seeddump.config")


def _assignment(line: str) -> Optional[tuple[str, str]]:
    line = line.strip()
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = (part.strip() for part in line.split("=", 1))
    if not key.isidentifier():
        return None
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        value = value[1:-1]
    return key, value


def read_env_file(path: Path) -> dict[str, str]:
    """Assignments of `path` in file order; later duplicates win."""
    values: dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        pair = _assignment(raw)
        if pair is not None:
            values[pair[0]] = pair[1]
    return values


def _candidates(search_dirs: Optional[Iterable[Path]]) -> list[Path]:
    explicit = os.environ.get(ENV_FILE_VAR)
    if explicit:
        return [Path(explicit)]
    dirs = [Path.cwd()] if search_dirs is None else list(search_dirs)
    return [d / ".env" for d in dirs]


def load_env_if_present(*, override: bool = False, search_dirs: Optional[Iterable[Path]] = None) -> list[Path]:
    """Export `.env` assignments into `os.environ`; returns the files read.

    `SEED_DUMP_ENV_FILE` names a single file to read instead of searching
    `search_dirs` (default: the working directory).
    """
    loaded: list[Path] = []
    for path in _candidates(search_dirs):
        if not path.is_file():
            continue
        for key, value in read_env_file(path).items():
            if override or key not in os.environ:
                os.environ[key] = value
        logger.debug("loaded %s", path)
        loaded.append(path)
    return loaded
