"""Event log sink for bus network simulation.

The simulation reports every state transition as a categorized, human-readable
entry. The sink keeps only the most recent entries; nothing in the engine reads
the log back, so its capacity never affects simulation behaviour.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Deque, List, Optional

from bus_sim.core.enums import LogCategory
from bus_sim.utils.logging_config import setup_logger

LEVELS = {
    LogCategory.INFO: logging.INFO,
    LogCategory.SUCCESS: logging.INFO,
    LogCategory.WARNING: logging.WARNING,
    LogCategory.ERROR: logging.ERROR,
}


@dataclass
class LogEntry:
    """One event log line.

    Attributes:
        tick: Simulation tick at which the entry was written.
        category: Severity category.
        message: Human-readable text.
        timestamp: Wall-clock time of the entry.
    """

    tick: int
    category: LogCategory
    message: str
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self) -> str:
        """Render the entry the way the log panel shows it."""
        return f"[{self.timestamp.strftime('%H:%M:%S')}] {self.message}"


class EventLog:
    """Append-only sink of simulation events with bounded retention.

    Attributes:
        capacity: Number of entries retained.
        emitted: Total number of entries ever written, including dropped ones.
    """

    def __init__(self, capacity: int = 50, log_file: Optional[str] = None) -> None:
        """Initialize an empty log.

        Args:
            capacity: Number of most recent entries to keep.
            log_file: Optional name of a file under logs/ mirroring every entry.
        """
        self.capacity = capacity
        self.emitted = 0
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._listeners: List[Callable[[LogEntry], None]] = []
        self.logger = setup_logger("bus_sim.events", log_file)

    def write(self, category: LogCategory, message: str, tick: int = 0) -> LogEntry:
        """Append an entry.

        Args:
            category: Severity category.
            message: Human-readable text.
            tick: Current simulation tick.

        Returns:
            The new entry.
        """
        entry = LogEntry(tick, category, message)
        self._entries.append(entry)
        self.emitted += 1
        self.logger.log(LEVELS[category], message)
        for listener in self._listeners:
            listener(entry)
        return entry

    def subscribe(self, listener: Callable[[LogEntry], None]) -> None:
        """Call listener with every new entry."""
        self._listeners.append(listener)

    @property
    def entries(self) -> List[LogEntry]:
        """Retained entries, oldest first."""
        return list(self._entries)

    def messages(self, category: Optional[LogCategory] = None) -> List[str]:
        """Get retained messages, optionally filtered by category.

        Args:
            category: Only return entries of this category.

        Returns:
            Messages, oldest first.
        """
        return [
            entry.message
            for entry in self._entries
            if category is None or entry.category is category
        ]

    def latest(self, count: int = 1) -> List[LogEntry]:
        """Get the most recent entries, newest first."""
        return list(reversed(self._entries))[:count]

    def __len__(self) -> int:
        return len(self._entries)
