"""
browser_session.py

What this module does
- Hands out one live Playwright page backed by a browser that outlives this process.

Why it matters
- fill, submit and download run as separate CLI invocations. A browser launched through
  `chromium.launch()` dies with the Playwright driver of the process that launched it,
  so the browser is started as a detached OS process and every invocation attaches to it
  over the Chrome DevTools Protocol (CDP).

Behavior summary
- `acquire_page()`: reconnects to the browser recorded in the session descriptor; if that
  fails for any reason (process gone, stale endpoint, no pages) the stale descriptor is
  dropped and a fresh browser is launched with a new descriptor (all flags False).
- `close()`: disconnects this process only. The browser keeps running.
- `terminate()`: kills the browser process tree, removes its temp profile and deletes the
  descriptor. Safe to call with no session.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path

import psutil
from playwright.sync_api import Error as PWError
from playwright.sync_api import sync_playwright

from parcel_labels.scraping.session_store import SessionDescriptor, SessionStore
from parcel_labels.utils.errors import BrowserLaunchError

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1280, "height": 900}
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
LAUNCH_TIMEOUT_S = 15.0
CONNECT_TIMEOUT_MS = 10_000
DEFAULT_TIMEOUT_MS = 30_000


@dataclass(frozen=True)
class BrowserProcess:
    pid: int
    ws_endpoint: str
    user_data_dir: str


def _detach_kwargs() -> dict:
    if os.name == "nt":
        flags = subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
        return {"creationflags": flags}
    return {"start_new_session": True}


def read_devtools_endpoint(user_data_dir: Path) -> str | None:
    """
    Chromium writes `DevToolsActivePort` into its profile once the debugging server is up:
    line 1 is the port, line 2 the browser websocket path.
    """
    port_file = Path(user_data_dir) / "DevToolsActivePort"
    try:
        lines = port_file.read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        return None
    if len(lines) < 2 or not lines[0].strip().isdigit():
        return None  # still being written
    return f"ws://127.0.0.1:{lines[0].strip()}{lines[1].strip()}"


def launch_browser_process(
    executable: str,
    *,
    headless: bool = True,
    timeout_s: float = LAUNCH_TIMEOUT_S,
) -> BrowserProcess:
    """
    What it does:
    - Starts Chromium as a detached process with remote debugging on a free port.

    Behavior:
    - Waits (bounded) for the DevTools endpoint; kills the process and raises
      BrowserLaunchError if it exits early or never comes up.
    """
    user_data_dir = tempfile.mkdtemp(prefix="parcel-labels-profile-")
    args = [
        executable,
        "--remote-debugging-port=0",
        f"--user-data-dir={user_data_dir}",
        f"--window-size={VIEWPORT['width']},{VIEWPORT['height']}",
        f"--user-agent={USER_AGENT}",
        "--no-first-run",
        "--no-default-browser-check",
    ]
    if headless:
        args.append("--headless=new")
    args.append("about:blank")

    try:
        proc = subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            **_detach_kwargs(),
        )
    except OSError as e:
        shutil.rmtree(user_data_dir, ignore_errors=True)
        raise BrowserLaunchError(
            "Failed to launch Playwright Chromium.\n"
            "If this is the first time on this machine, run:\n\n"
            "  uv run playwright install chromium\n"
        ) from e

    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if proc.poll() is not None:
            shutil.rmtree(user_data_dir, ignore_errors=True)
            raise BrowserLaunchError(f"Browser exited during startup (code {proc.returncode})")
        endpoint = read_devtools_endpoint(Path(user_data_dir))
        if endpoint:
            logger.info("Launched browser pid=%s at %s", proc.pid, endpoint)
            return BrowserProcess(pid=proc.pid, ws_endpoint=endpoint, user_data_dir=user_data_dir)
        time.sleep(0.1)

    proc.kill()
    shutil.rmtree(user_data_dir, ignore_errors=True)
    raise BrowserLaunchError(f"Browser did not expose a DevTools endpoint within {timeout_s:.0f}s")


def kill_browser_process(pid: int | None, user_data_dir: str | None = None) -> bool:
    """
    Terminates the browser and its helper processes. Returns False when nothing was running.

    With `user_data_dir`, the process is only killed if its command line carries that
    profile, so a recycled pid never takes down an unrelated process.
    """
    if not pid:
        return False
    try:
        parent = psutil.Process(pid)
        if user_data_dir and f"--user-data-dir={user_data_dir}" not in parent.cmdline():
            logger.warning("pid=%s no longer belongs to our browser, leaving it alone", pid)
            return False
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return False

    procs = parent.children(recursive=True) + [parent]
    for p in procs:
        try:
            p.terminate()
        except psutil.NoSuchProcess:
            pass

    _, alive = psutil.wait_procs(procs, timeout=5)
    for p in alive:
        try:
            p.kill()
        except psutil.NoSuchProcess:
            pass
    return True


class BrowserSessionManager:
    """
    What it does:
    - Owns this process's Playwright connection and the cross-process browser lifecycle.

    Why it matters:
    - Everything else just asks for a page; only this class knows whether it is fresh
      or reattached.

    Behavior:
    - The descriptor is read from the store on every acquire, never cached.
    - Within one process the connected page is reused.
    """

    def __init__(
        self,
        *,
        store: SessionStore,
        headless: bool = True,
        playwright_factory=sync_playwright,
        launcher=launch_browser_process,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self.store = store
        self.headless = headless
        self._playwright_factory = playwright_factory
        self._launcher = launcher
        self._default_timeout_ms = default_timeout_ms

        self._pw = None
        self._browser = None
        self._page = None

    @property
    def page(self):
        """The page acquired in this process, if any. Never launches anything."""
        return self._page

    # -------------------- Lifecycle --------------------

    def acquire_page(self):
        if self._page is not None and not self._page.is_closed():
            return self._page

        self._ensure_playwright()

        descriptor = self.store.read()
        if descriptor is None and self.store.exists():
            self.store.delete()  # unparseable leftovers

        if descriptor is not None:
            page = self._reconnect(descriptor)
            if page is not None:
                logger.info("Reconnected to browser session from %s", descriptor.created_at)
                return self._adopt(page)
            self._discard(descriptor)

        return self._adopt(self._cold_start())

    def close(self) -> None:
        """
        Disconnects from the browser without closing it.

        Safe to call multiple times.
        """
        try:
            if self._pw:
                self._pw.stop()
        finally:
            self._pw = None
            self._browser = None
            self._page = None

    def terminate(self) -> bool:
        """Returns True when a session (descriptor or running browser) was torn down."""
        killed = False
        try:
            descriptor = self.store.read()
            self.close()
            if descriptor is not None:
                killed = kill_browser_process(descriptor.browser_pid, descriptor.user_data_dir)
                if descriptor.user_data_dir:
                    shutil.rmtree(descriptor.user_data_dir, ignore_errors=True)
        finally:
            deleted = self.store.delete()
        return killed or deleted

    # -------------------- Helpers --------------------

    def _ensure_playwright(self) -> None:
        if self._pw is None:
            self._pw = self._playwright_factory().start()

    def _adopt(self, page):
        page.set_default_timeout(self._default_timeout_ms)
        self._page = page
        return page

    def _reconnect(self, descriptor: SessionDescriptor):
        if descriptor.browser_pid is not None and not psutil.pid_exists(descriptor.browser_pid):
            logger.warning("Browser pid=%s from previous session is gone", descriptor.browser_pid)
            return None

        try:
            browser = self._pw.chromium.connect_over_cdp(
                descriptor.connection_handle, timeout=CONNECT_TIMEOUT_MS
            )
        except PWError as e:
            logger.warning("Could not reconnect to %s: %s", descriptor.connection_handle, e)
            return None

        contexts = browser.contexts
        if not contexts or not contexts[0].pages:
            logger.warning("Previous browser session has no open pages")
            try:
                browser.close()
            except PWError as e:
                logger.debug("Closing the page-less connection failed: %s", e)
            return None

        self._browser = browser
        return contexts[0].pages[0]

    def _discard(self, descriptor: SessionDescriptor) -> None:
        """Drops a descriptor that could not be reattached, including any orphaned browser."""
        self._browser = None
        kill_browser_process(descriptor.browser_pid, descriptor.user_data_dir)
        if descriptor.user_data_dir:
            shutil.rmtree(descriptor.user_data_dir, ignore_errors=True)
        self.store.delete()

    def _cold_start(self):
        executable = self._pw.chromium.executable_path
        proc = self._launcher(executable, headless=self.headless)

        try:
            browser = self._pw.chromium.connect_over_cdp(proc.ws_endpoint, timeout=CONNECT_TIMEOUT_MS)
        except PWError as e:
            kill_browser_process(proc.pid, proc.user_data_dir)
            shutil.rmtree(proc.user_data_dir, ignore_errors=True)
            raise BrowserLaunchError(f"Launched browser but could not connect: {e}") from e

        context = browser.contexts[0] if browser.contexts else browser.new_context()
        page = context.pages[0] if context.pages else context.new_page()
        page.set_viewport_size(VIEWPORT)

        self._browser = browser
        self.store.write(
            SessionDescriptor.new(
                proc.ws_endpoint, browser_pid=proc.pid, user_data_dir=proc.user_data_dir
            )
        )
        logger.info("Started new browser session")
        return page
