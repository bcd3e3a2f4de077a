"""Line-per-event game log."""

from pathlib import Path

import structlog

logger = structlog.get_logger()


class EventLog:
    """Records one text line per notable game transition.

    Lines are kept in memory and, when a path is given, appended to that
    file as they arrive so an interrupted game still leaves a full log.
    """

    def __init__(self, path: Path | str | None = None):
        """Initialize EventLog.

        Args:
            path: File to append lines to, or None for in-memory only
        """
        self.path = Path(path) if path is not None else None
        self.lines: list[str] = []
        self._closed = False

        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def record(self, message: str) -> None:
        """Append one event line."""
        if self._closed:
            raise RuntimeError("EventLog is closed")
        self.lines.append(message)
        if self.path is not None:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(message + "\n")

    def close(self) -> None:
        """Stop accepting lines."""
        if self._closed:
            return
        self._closed = True
        if self.path is not None:
            logger.info("event_log_closed", path=str(self.path), lines=len(self.lines))
