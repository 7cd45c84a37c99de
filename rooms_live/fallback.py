# rooms_live/fallback.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from . import config

logger = logging.getLogger(__name__)


class FallbackLoader:
    """Reads saved copies of the room list page from a local directory."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory) if directory is not None else config.FALLBACK_DIR

    def load_local_document(self, name: str) -> Optional[str]:
        """
        Return the document text, or None when there is no usable copy.

        Unreadable files count as missing.
        """
        path = self.directory / name
        if not path.is_file():
            return None
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Could not read fallback file %s: %s", path, e)
            return None
        logger.info("Using local fallback file %s.", path)
        return text
