"""Environment loading helpers.

Credentials are read from the process environment. An optional dotenv file
can supply them instead, but it never overrides variables that are already
present in the process environment (e.g. exported in the shell or set by
the CI runner).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import dotenv_values

from dashsync.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def load_env_file(path: Path) -> list[str]:
    """Load variables from a dotenv file into ``os.environ``.

    Args:
        path: dotenv file to read

    Returns:
        Names of the variables that were set from the file.

    Raises:
        ConfigError: If the file does not exist
    """
    if not path.is_file():
        raise ConfigError(f"Environment file not found: {path}", path=str(path))

    loaded: list[str] = []
    for k, v in dotenv_values(path).items():
        if k is None or v is None:
            continue
        if k in os.environ:
            continue
        os.environ[str(k)] = str(v)
        loaded.append(str(k))

    logger.debug("Loaded %d variables from %s", len(loaded), path)
    return loaded
