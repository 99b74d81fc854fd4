"""Clipboard monitor: background capture loop and shared session state."""

import logging
import re
import threading
from collections import deque
from enum import Enum
from typing import Callable, Optional

from .clipboard import ClipboardReadError
from .models.record import CardRecord, Metadata
from .sink import JsonArrayWriter

logger = logging.getLogger(__name__)

# Copying a page address is how the user grabs a value for `source`, so
# URLs are never logged as clipboard items.
URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)

NOTICE_PREVIEW_CHARS = 10
MAX_NOTICES = 100


class LoopState(str, Enum):
    INIT = "init"
    WATCHING = "watching"


class ClipboardMonitor:
    """Watches the clipboard and writes each replaced item as a record.

    When the clipboard changes, the *previous* item is written with the
    metadata current at that moment, and the new content becomes the
    pending item. Content already on the clipboard at startup is never
    captured.

    All state shared with the capture thread (metadata, pending item and
    the JSON writer) is guarded by one lock.
    """

    def __init__(
        self,
        writer: JsonArrayWriter,
        read_clipboard: Callable[[], str],
        poll_interval: float = 1.0,
    ):
        """Initialize the monitor.

        Args:
            writer: JSON array writer that receives finalized records
            read_clipboard: Callable returning the current clipboard text;
                may raise ClipboardReadError
            poll_interval: Seconds between clipboard reads
        """
        self.writer = writer
        self.read_clipboard = read_clipboard
        self.poll_interval = poll_interval

        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self._metadata = Metadata()
        self._pending: Optional[str] = None
        self._last_observed: Optional[str] = None
        self._state = LoopState.INIT
        self._shut_down = False
        # Oldest notices drop off while nobody is at the prompt.
        self._notices: deque[str] = deque(maxlen=MAX_NOTICES)

        self.last_error: Optional[BaseException] = None

    # ---------- metadata ----------

    @property
    def source(self) -> str:
        with self._lock:
            return self._metadata.source

    @property
    def tag(self) -> str:
        with self._lock:
            return self._metadata.tag

    @property
    def note(self) -> str:
        with self._lock:
            return self._metadata.note

    @property
    def is_extract(self) -> bool:
        with self._lock:
            return self._metadata.is_extract

    @property
    def records_written(self) -> int:
        with self._lock:
            return self.writer.records_written

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def set_source(self, source: str) -> None:
        with self._lock:
            self._metadata.source = source

    def set_tag(self, tag: str) -> None:
        with self._lock:
            self._metadata.tag = tag

    def set_note(self, note: str) -> None:
        """Set the note for the next record written (single use)."""
        with self._lock:
            self._metadata.note = note

    def toggle_extract(self) -> bool:
        """Flip the extract flag and return its new value."""
        with self._lock:
            self._metadata.is_extract = not self._metadata.is_extract
            return self._metadata.is_extract

    def snapshot(self) -> CardRecord:
        """Record for the pending item as it would be written now.

        Does not consume the note or the pending item.
        """
        with self._lock:
            return CardRecord.build(self._pending or "", self._metadata)

    def drain_notices(self) -> list[str]:
        """Return and clear messages posted by the capture loop."""
        with self._lock:
            notices = list(self._notices)
            self._notices.clear()
            return notices

    # ---------- capture loop ----------

    def start(self) -> None:
        """Open the JSON array and start polling in a background thread."""
        if self._thread is not None:
            return
        with self._lock:
            self.writer.open()
        self._thread = threading.Thread(target=self._run, name="clipcard-monitor", daemon=True)
        self._thread.start()
        logger.debug("Capture loop started (interval %.2fs)", self.poll_interval)

    def _run(self) -> None:
        try:
            while not self._stop_event.is_set():
                self.poll_once()
                # Returns early as soon as shutdown() sets the event.
                self._stop_event.wait(self.poll_interval)
        except Exception as e:
            logger.exception("Capture loop stopped unexpectedly")
            with self._lock:
                self.last_error = e
                self._notices.append(f"capture stopped: {e}. Clipboard is no longer being logged.")

    def poll_once(self) -> None:
        """Run one tick of the capture loop.

        Clipboard read failures are logged and skipped; the next tick
        tries again.
        """
        try:
            content = self.read_clipboard()
        except ClipboardReadError as e:
            logger.warning("Clipboard read failed: %s", e)
            return

        with self._lock:
            if self._shut_down:
                return

            if self._state is LoopState.INIT:
                # Pre-existing clipboard content is the baseline, not a capture.
                self._last_observed = content
                self._state = LoopState.WATCHING
                return

            if content == self._last_observed:
                return

            if URL_PATTERN.match(content):
                logger.debug("Ignoring URL copied to clipboard")
            else:
                self._notices.append(f'copied "{content[:NOTICE_PREVIEW_CHARS]} ..."')
                self._finalize_pending_locked()
                self._pending = content

            self._last_observed = content

    def _finalize_pending_locked(self) -> Optional[CardRecord]:
        """Write the pending item, if any. Caller must hold the lock."""
        content = self._pending
        if content is None or not content.strip():
            return None

        record = CardRecord.build(content, self._metadata)
        self.writer.write(record)
        logger.info("Wrote record %d (%d chars)", self.writer.records_written, len(content))

        # The note only applied to this item.
        self._metadata.note = ""
        self._pending = None
        return record

    # ---------- shutdown ----------

    def shutdown(self, timeout: Optional[float] = None) -> bool:
        """Write the pending item, close the JSON array and stop polling.

        The array is closed even if writing the last item fails.

        Returns:
            True if this call shut the monitor down, False if already shut down
        """
        with self._lock:
            if self._shut_down:
                return False
            self._shut_down = True
            try:
                self._finalize_pending_locked()
            except Exception:
                logger.exception("Failed to write last clipboard item")
            finally:
                self.writer.close()

        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout if timeout is not None else self.poll_interval + 5)
        logger.debug("Capture loop stopped")
        return True
