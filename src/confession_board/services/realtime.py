"""In-process change notifications for live views.

Services publish a `ChangeEvent` after every committed insert, update or
delete. Views subscribe to the tables they render and re-fetch when an event
arrives; the WebSocket endpoint is one such subscriber. Subscriptions are
explicit objects owned by the view and must be released when the view goes
away.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from threading import Lock
from typing import Any

logger = logging.getLogger(__name__)

TABLE_CONFESSIONS = "confessions"
TABLE_VOTES = "confession_votes"
TABLE_COMMENTS = "confession_comments"
TABLE_REPORTS = "confession_reports"

KNOWN_TABLES = frozenset({TABLE_CONFESSIONS, TABLE_VOTES, TABLE_COMMENTS, TABLE_REPORTS})


class ChangeType(str, Enum):
    """Kind of row change."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """Notification that a row in `table` changed."""

    table: str
    event: ChangeType
    record_id: str
    confession_id: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "table": self.table,
            "event": self.event.value,
            "record_id": self.record_id,
            "confession_id": self.confession_id,
        }


ChangeCallback = Callable[[ChangeEvent], None]


@dataclass(eq=False)
class Subscription:
    """Handle returned by `ChangeFeed.subscribe`."""

    feed: ChangeFeed
    tables: frozenset[str]
    callback: ChangeCallback
    active: bool = field(default=True)

    def matches(self, event: ChangeEvent) -> bool:
        return self.active and event.table in self.tables

    def unsubscribe(self) -> None:
        """Stop receiving events. Safe to call more than once."""
        self.feed.remove(self)


class ChangeFeed:
    """Fan change events out to registered callbacks."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._subscriptions: list[Subscription] = []

    def subscribe(self, tables: Iterable[str], callback: ChangeCallback) -> Subscription:
        """Register `callback` for changes to any of `tables`.

        Raises:
            ValueError: If no tables are given or a table name is unknown.
        """
        wanted = frozenset(tables)
        if not wanted:
            raise ValueError("At least one table is required")
        unknown = wanted - KNOWN_TABLES
        if unknown:
            raise ValueError(f"Unknown tables: {', '.join(sorted(unknown))}")

        subscription = Subscription(feed=self, tables=wanted, callback=callback)
        with self._lock:
            self._subscriptions.append(subscription)
        logger.debug("Subscribed to %s", sorted(wanted))
        return subscription

    def remove(self, subscription: Subscription) -> None:
        with self._lock:
            subscription.active = False
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, event: ChangeEvent) -> int:
        """Deliver `event` to matching subscribers and return how many got it.

        A subscriber whose callback raises is detached so one broken view
        cannot starve the others.
        """
        with self._lock:
            targets = [sub for sub in self._subscriptions if sub.matches(event)]

        delivered = 0
        for subscription in targets:
            try:
                subscription.callback(event)
            except Exception:
                logger.exception("Change subscriber failed; detaching it")
                self.remove(subscription)
            else:
                delivered += 1
        logger.debug("Published %s %s to %d subscriber(s)", event.table, event.event.value, delivered)
        return delivered

    def close(self) -> None:
        """Tear down every subscription."""
        with self._lock:
            for subscription in self._subscriptions:
                subscription.active = False
            self._subscriptions.clear()


_change_feed: ChangeFeed | None = None


def get_change_feed() -> ChangeFeed:
    """Return the process-wide change feed, creating it on first use."""
    global _change_feed
    if _change_feed is None:
        _change_feed = ChangeFeed()
    return _change_feed
