"""
Script rendering with Playwright.

All Playwright calls happen on one dedicated thread; crawl workers hand
it URLs through a queue and block until the rendered body comes back.
"""
from __future__ import annotations

import logging
import queue
import threading
from typing import Optional, Union

from linkcrawler.exceptions import RenderError
from linkcrawler.fetcher import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

GOTO_TIMEOUT_S = 30.0
IDLE_TIMEOUT_S = 5.0
POLL_INTERVAL_S = 0.5

LAUNCH_ARGS = [
    "--disable-gpu",
    "--no-sandbox",
    "--disable-dev-shm-usage",
]


class _RenderRequest:
    def __init__(self, url: str) -> None:
        self.url = url
        self.result: "queue.Queue[Union[str, BaseException]]" = queue.Queue(maxsize=1)


class ScriptRenderer:
    """Returns page bodies after client-side scripts have run."""

    def __init__(
        self,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        goto_timeout: float = GOTO_TIMEOUT_S,
        idle_timeout: float = IDLE_TIMEOUT_S,
    ) -> None:
        self._user_agent = user_agent
        self._goto_timeout_ms = int(goto_timeout * 1000)
        self._idle_timeout_ms = int(idle_timeout * 1000)
        self._requests: "queue.Queue[Optional[_RenderRequest]]" = queue.Queue()
        self._ready = threading.Event()
        self._startup_error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Launch the browser thread. Raises RenderError if Chromium cannot start."""
        if self._thread is not None:
            return
        self._ready.clear()
        self._startup_error = None
        self._thread = threading.Thread(target=self._render_loop, name="script-renderer", daemon=True)
        self._thread.start()
        self._ready.wait()
        if self._startup_error is not None:
            self._thread.join()
            self._thread = None
            if isinstance(self._startup_error, ImportError):
                raise RenderError(
                    "Script execution requires: pip install linkcrawler[js] && playwright install chromium"
                ) from self._startup_error
            raise RenderError(f"Could not start browser: {self._startup_error}") from self._startup_error

    def render(self, url: str) -> str:
        if self._thread is None or not self._thread.is_alive():
            raise RenderError("Renderer is not running; call start() first")
        request = _RenderRequest(url)
        self._requests.put(request)
        result = self._wait_for(request)
        if isinstance(result, BaseException):
            raise RenderError(f"Rendering {url} failed: {result}") from result
        return result

    def _wait_for(self, request: _RenderRequest) -> Union[str, BaseException]:
        thread = self._thread
        while True:
            try:
                return request.result.get(timeout=POLL_INTERVAL_S)
            except queue.Empty:
                pass
            if thread is None or not thread.is_alive():
                # The thread may have answered just before exiting
                try:
                    return request.result.get_nowait()
                except queue.Empty:
                    return RenderError("Render thread stopped")

    def close(self) -> None:
        if self._thread is None:
            return
        self._requests.put(None)
        self._thread.join()
        self._thread = None

    def __enter__(self) -> ScriptRenderer:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _render_loop(self) -> None:
        try:
            from playwright.sync_api import sync_playwright
        except ImportError as e:
            self._startup_error = e
            self._ready.set()
            return

        try:
            with sync_playwright() as p:
                try:
                    browser = p.chromium.launch(headless=True, args=LAUNCH_ARGS)
                    context = browser.new_context(user_agent=self._user_agent)
                except Exception as e:
                    self._startup_error = e
                    return
                finally:
                    self._ready.set()

                logger.info("render thread started")
                try:
                    self._serve(context)
                finally:
                    context.close()
                    browser.close()
        except Exception as e:
            if not self._ready.is_set():
                self._startup_error = e
                self._ready.set()
            else:
                logger.exception("render thread stopped: %s", e)
            self._fail_waiting(e)

    def _serve(self, context) -> None:
        while True:
            request = self._requests.get()
            if request is None:
                return
            page = None
            try:
                page = context.new_page()
                page.goto(request.url, wait_until="domcontentloaded", timeout=self._goto_timeout_ms)
                try:
                    page.wait_for_load_state("networkidle", timeout=self._idle_timeout_ms)
                except Exception:
                    # Pages that keep polling never go idle; use what has rendered so far
                    logger.debug("no network idle for %s", request.url)
                request.result.put(page.content())
            except Exception as e:
                request.result.put(e)
            finally:
                if page is not None:
                    page.close()

    def _fail_waiting(self, error: BaseException) -> None:
        while True:
            try:
                request = self._requests.get_nowait()
            except queue.Empty:
                return
            if request is not None:
                request.result.put(error)
