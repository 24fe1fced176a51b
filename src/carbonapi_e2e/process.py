"""Lifecycle of the locally managed server processes under test."""

from __future__ import annotations

import logging
import subprocess
import threading

from .models import ManagedApp

logger = logging.getLogger(__name__)


class ManagedProcess:
    """Handle for one managed app; safe to stop whether or not it ever started."""

    def __init__(self, app: ManagedApp) -> None:
        self.app = app
        self.error: str | None = None
        self._proc: subprocess.Popen[bytes] | None = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.app.name

    @property
    def pid(self) -> int | None:
        return None if self._proc is None else self._proc.pid

    def running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def start(self) -> None:
        argv = [self.app.binary, *self.app.args]
        with self._lock:
            if self._proc is not None:
                return
            logger.info("starting app name=%s argv=%s", self.app.name, argv)
            try:
                self._proc = subprocess.Popen(argv)
            except OSError as exc:
                self.error = f"{exc.__class__.__name__}: {exc}"
                logger.error("failed to start app name=%s: %s", self.app.name, self.error)
                return
        logger.info("app started name=%s pid=%s", self.app.name, self._proc.pid)

    def stop(self, *, timeout: float = 10.0) -> int | None:
        with self._lock:
            proc = self._proc
        if proc is None:
            return None
        if proc.poll() is not None:
            logger.info("app already exited name=%s code=%s", self.app.name, proc.returncode)
            return proc.returncode

        logger.info("stopping app name=%s pid=%s", self.app.name, proc.pid)
        proc.terminate()
        try:
            return proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning("app did not exit within %.1fs, killing name=%s", timeout, self.app.name)
            proc.kill()
            return proc.wait()


class ProcessLauncher:
    """Best-effort start/stop of managed apps. Neither operation raises."""

    def __init__(self, *, stop_timeout: float = 10.0) -> None:
        self._stop_timeout = stop_timeout

    def start(self, app: ManagedApp) -> ManagedProcess:
        handle = ManagedProcess(app)
        handle.start()
        return handle

    def stop(self, handle: ManagedProcess) -> None:
        try:
            code = handle.stop(timeout=self._stop_timeout)
        except OSError as exc:
            logger.error("failed to stop app name=%s: %s", handle.name, exc)
            return
        if code is not None:
            logger.info("app stopped name=%s code=%s", handle.name, code)
