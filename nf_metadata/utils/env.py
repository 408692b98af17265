"""
`.env` loading for the gateway and the CLI scripts.

`NF_METADATA_ENV_FILE` names an explicit file; otherwise the first `.env`
found in the working directory or the repo root is used. Variables already
set in the process environment win unless `override=True`.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENV_FILE_VAR = "NF_METADATA_ENV_FILE"


def _env_candidates() -> list[Path]:
    explicit = (os.getenv(ENV_FILE_VAR) or "").strip()
    if explicit:
        return [Path(explicit).expanduser()]
    return [Path.cwd() / ".env", Path(__file__).resolve().parents[2] / ".env"]


def load_env(*, override: bool = False) -> Path | None:
    """Load the first existing candidate file and return its path, or None."""
    for path in _env_candidates():
        if path.is_file():
            load_dotenv(dotenv_path=path, override=override)
            logger.debug(f"Loaded environment from {path}")
            return path
    return None
