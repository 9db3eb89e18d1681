# backend/utils/changefeed.py
"""
In-process change notifications.

A write endpoint publishes the names of the tables it changed after its
commit succeeded; every open subscription gets called once per table name.
The name is only a "refetch" trigger, listeners should not expect more.

    sub = feed.open(lambda table: print(table, "changed"))
    ...
    sub.close()
"""
import logging
import threading
from typing import Callable, List

from fastapi import Request

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str], None]


class Subscription:
    def __init__(self, feed: "ChangeFeed", on_change: ChangeListener):
        self._feed = feed
        self.on_change = on_change
        self.closed = False

    def close(self) -> None:
        if not self.closed:
            self._feed._remove(self)
            self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class ChangeFeed:
    def __init__(self):
        self._subscriptions: List[Subscription] = []
        # publish() runs in the request threadpool, open()/close() on the event loop
        self._lock = threading.Lock()

    def open(self, on_change: ChangeListener) -> Subscription:
        sub = Subscription(self, on_change)
        with self._lock:
            self._subscriptions.append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, *tables: str) -> None:
        with self._lock:
            listeners = list(self._subscriptions)
        for table in tables:
            for sub in listeners:
                try:
                    sub.on_change(table)
                except Exception:
                    # The write already committed; listener errors are only logged
                    logger.exception(f"Change listener failed for table {table}")


def get_change_feed(request: Request) -> ChangeFeed:
    return request.app.state.change_feed
