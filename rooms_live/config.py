# rooms_live/config.py
from __future__ import annotations

import os
from pathlib import Path


# -----------------------------
# HTTP server
# -----------------------------

PORT = int(os.getenv("PORT", "8080"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

WARMING_UP_MESSAGE = "Server is warming up, please try again in 30 seconds."


# -----------------------------
# Remote page
# -----------------------------

WIIMMFI_URL = os.getenv("WIIMMFI_URL", "https://wiimmfi.de/stats/mkw")
FETCH_TIMEOUT_MS = int(os.getenv("FETCH_TIMEOUT_MS", "120000"))

# A rendered page without this marker has no room table
ROOM_TABLE_MARKER = "table11"


# -----------------------------
# Browser
# -----------------------------

ENGINE = os.getenv("PLAYWRIGHT_ENGINE", "chromium").lower()  # "chromium" or "firefox"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)
VIEWPORT = {"width": 1280, "height": 800}
WAIT_UNTIL = "networkidle"


# -----------------------------
# Local fallback
# -----------------------------

FALLBACK_DIR = Path(os.getenv("FALLBACK_DIR", os.getcwd()))
FALLBACK_FILE = os.getenv("FALLBACK_FILE", "wiimmfi.html")
