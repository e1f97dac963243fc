"""
Owner-only file writes for device secrets (ADP token, private key).
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

SECURE_FILE_MODE = 0o600  # Owner read/write only


def secure_file_create(path: Path, content: str | bytes, mode: int = SECURE_FILE_MODE) -> bool:
    """
    Write ``content`` to ``path`` so that only the owner can read it.

    A new file is opened with ``mode`` under a 077 umask. An existing file is
    truncated and chmod-ed to ``mode``, since open() leaves its bits alone.

    Returns:
        True if the file was written, False on OSError (logged)
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)

        old_umask = os.umask(0o077)
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        finally:
            os.umask(old_umask)

        try:
            os.fchmod(fd, mode)
            os.write(fd, content)
        finally:
            os.close(fd)

    except OSError as e:
        logger.error("Failed to write secrets file '%s': %s", path, e)
        return False

    logger.debug("Wrote secrets file '%s' (mode %o)", path, mode)
    return True
