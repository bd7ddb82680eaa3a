"""Log bus: fan-out of formatted log records to in-process subscribers.

The core logger publishes every emitted line here before printing it, so
tests and alternative frontends can observe wizard output without parsing
the terminal. Subscriber failures are suppressed; publishing never raises.
"""

from __future__ import annotations

import contextlib
import sys
import traceback
from collections.abc import Callable, Iterator
from dataclasses import dataclass

Subscriber = Callable[["LogRecord"], None]


@dataclass(frozen=True)
class LogRecord:
    level_name: str
    message: str
    logger_name: str

    @property
    def plain(self) -> str:
        return f"[{self.level_name.lower()}] {self.message}"


class LogBus:
    def __init__(self) -> None:
        self._by_level: dict[str, list[Subscriber]] = {}
        self._all: list[Subscriber] = []

    def subscribe(self, level_name: str, cb: Subscriber) -> None:
        self._by_level.setdefault(level_name.upper(), []).append(cb)

    def subscribe_all(self, cb: Subscriber) -> None:
        self._all.append(cb)

    def unsubscribe(self, cb: Subscriber) -> None:
        """Remove ``cb`` from every subscription list it appears in."""
        with contextlib.suppress(ValueError):
            self._all.remove(cb)
        for level_name in list(self._by_level):
            subs = self._by_level[level_name]
            with contextlib.suppress(ValueError):
                subs.remove(cb)
            if not subs:
                del self._by_level[level_name]

    def publish(self, record: LogRecord) -> None:
        targets = list(self._all) + list(self._by_level.get(record.level_name, []))
        for cb in targets:
            try:
                cb(record)
            except Exception:
                # Writing through the logger here would recurse.
                with contextlib.suppress(Exception):
                    sys.stderr.write(
                        "LogBus subscriber raised; suppressed.\n" + traceback.format_exc()
                    )

    @contextlib.contextmanager
    def capture(self) -> Iterator[list[LogRecord]]:
        """Collect every record published inside the ``with`` block."""
        records: list[LogRecord] = []
        self.subscribe_all(records.append)
        try:
            yield records
        finally:
            self.unsubscribe(records.append)

    def clear(self) -> None:
        self._by_level.clear()
        self._all.clear()


_LOG_BUS: LogBus | None = None


def get_log_bus() -> LogBus:
    global _LOG_BUS
    if _LOG_BUS is None:
        _LOG_BUS = LogBus()
    return _LOG_BUS
