"""Small filesystem helpers."""

from __future__ import annotations

import glob
import logging
import os
import time

logger = logging.getLogger(__name__)


def filter_files_in_dir(sub_string: str, path: str) -> list[str]:
    """Return files whose name starts with ``path`` and contains ``sub_string``."""
    return sorted(glob.glob(f"{path}*{sub_string}*"))


def get_file_age(path: str) -> float:
    """Return seconds since the file's birth time, or 0 when it cannot be told."""
    try:
        st = os.stat(path)
    except OSError as err:
        logger.error("%s", err)
        return 0.0
    birth = getattr(st, "st_birthtime", None)
    if birth is None:
        logger.warning("File %s has no birth time.", path)
        return 0.0
    return time.time() - birth