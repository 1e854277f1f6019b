"""Docker-secret style ``*_FILE`` variables.

The reasoning API key is normally mounted as a secret file. Pointing
``REASONING_API_KEY_FILE`` at it exposes the key as ``REASONING_API_KEY``, and
``GEMINI_API_KEY_FILE`` exposes it as ``GEMINI_API_KEY``, before the settings are
read; the reasoning settings accept either variable.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, MutableMapping, Optional

logger = logging.getLogger(__name__)

FILE_SUFFIX = "_FILE"


def _read_secret(key: str, file_path: str) -> Optional[str]:
    try:
        return Path(file_path).read_text(encoding="utf-8").strip()
    except FileNotFoundError as exc:
        event = "env.secret_file.missing"
        error = exc
    except UnicodeDecodeError as exc:
        event = "env.secret_file.decode_failed"
        error = exc
    except OSError as exc:
        event = "env.secret_file.load_failed"
        error = exc
    logger.warning(event, extra={"key": key, "path": file_path, "error": str(error)})
    return None


def load_secret_file_variables(
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Expose the content of every ``KEY_FILE`` as ``KEY``.

    A variable that is already set wins over its file. Unreadable files are
    logged and skipped.

    Returns:
        Mapping of each resolved variable to the file it was read from
    """
    env = os.environ if environ is None else environ
    resolved: Dict[str, str] = {}

    for key, file_path in list(env.items()):
        if not key.endswith(FILE_SUFFIX) or not file_path:
            continue
        target_key = key[: -len(FILE_SUFFIX)]
        if env.get(target_key):
            continue
        value = _read_secret(key, file_path)
        if value is not None:
            env[target_key] = value
            resolved[target_key] = file_path

    return resolved


load_secret_file_variables()
