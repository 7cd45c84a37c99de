# rooms_live/scrape.py
from __future__ import annotations

import contextlib
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from playwright.sync_api import sync_playwright, TimeoutError as PWTimeoutError, Error as PWError

from . import config

logger = logging.getLogger(__name__)


class RetrievalError(Exception):
    """Raised when the browser cannot be started or the page cannot be loaded."""


LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-zygote",
    "--disable-extensions",
    "--disable-background-networking",
    "--disable-breakpad",
    "--disable-default-apps",
    "--disable-features=Translate,AcceptCHFrame,MediaRouter",
    "--disable-popup-blocking",
    "--mute-audio",
    "--no-first-run",
    "--js-flags=--max-old-space-size=256",
]

BLOCKED_RESOURCES = {"image", "media", "font"}


def _router(route):
    if route.request.resource_type in BLOCKED_RESOURCES:
        return route.abort()
    return route.continue_()


class BrowserSession:
    """
    One headless browser and one page, reused for the life of the process.

    Playwright's sync objects belong to the thread that created them, while
    FastAPI calls us from its thread pool. Every browser call is therefore
    handed to a private single-thread executor.
    """

    def __init__(
        self,
        engine: str = config.ENGINE,
        user_agent: str = config.USER_AGENT,
        viewport: Optional[dict] = None,
        wait_until: str = config.WAIT_UNTIL,
    ):
        self.engine = engine
        self.user_agent = user_agent
        self.viewport = viewport or dict(config.VIEWPORT)
        self.wait_until = wait_until
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="playwright")
        self._play = None
        self._browser = None
        self._context = None
        self._page = None

    @property
    def ready(self) -> bool:
        return self._page is not None

    def ensure_ready(self) -> None:
        self._executor.submit(self._start).result()

    def fetch_document(self, url: str, timeout_ms: int) -> str:
        return self._executor.submit(self._load, url, timeout_ms).result()

    def close(self) -> None:
        with contextlib.suppress(Exception):
            self._executor.submit(self._stop).result()
        self._executor.shutdown(wait=False)

    # --- runs on the playwright thread ---

    def _start(self) -> None:
        if self._page is not None:
            if self._browser.is_connected():
                return
            logger.warning("Browser disconnected, relaunching.")
            self._stop()
        logger.info("Launching %s...", self.engine)
        try:
            self._play = sync_playwright().start()
            if self.engine == "firefox":
                self._browser = self._play.firefox.launch(headless=True)
            else:
                self._browser = self._play.chromium.launch(headless=True, args=LAUNCH_ARGS)
            self._context = self._browser.new_context(
                user_agent=self.user_agent,
                viewport=self.viewport,
                locale="en-US",
            )
            self._context.route("**/*", _router)
            self._page = self._context.new_page()
        except PWError as e:
            self._stop()
            raise RetrievalError(f"Could not launch {self.engine}: {e}") from e
        logger.info("Browser ready.")

    def _load(self, url: str, timeout_ms: int) -> str:
        if self._page is None:
            raise RetrievalError("Browser session is not started")
        logger.info("Navigating to %s", url)
        try:
            self._page.goto(url, timeout=timeout_ms, wait_until=self.wait_until)
            return self._page.content()
        except PWTimeoutError as e:
            raise RetrievalError(f"Timed out after {timeout_ms} ms loading {url}") from e
        except PWError as e:
            if "closed" in str(e).lower():
                # dead page or browser; the next cycle launches a new one
                self._stop()
            raise RetrievalError(f"Navigation to {url} failed: {e}") from e

    def _stop(self) -> None:
        with contextlib.suppress(Exception):
            if self._browser:
                self._browser.close()
        with contextlib.suppress(Exception):
            if self._play:
                self._play.stop()
        self._page = None
        self._context = None
        self._browser = None
        self._play = None
