"""
Unbuffered task channel between the producer and the download workers.

put() hands one item to exactly one receiver and returns only once that
receiver has taken it. close() is the sole termination signal: receivers
drain any pending handoff, then get() raises ChannelClosed.
"""

from __future__ import annotations

import threading
from typing import Generic, Iterator, Optional, TypeVar

from .exceptions import ChannelClosed


T = TypeVar("T")


class TaskChannel(Generic[T]):
    def __init__(self):
        self._cond = threading.Condition()
        self._item: Optional[T] = None
        self._has_item = False
        self._taken = False
        self._closed = False
        # Serializes producers so only one handoff is in flight
        self._send_lock = threading.Lock()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def put(self, item: T) -> None:
        """Block until a receiver has taken item."""
        with self._send_lock:
            with self._cond:
                if self._closed:
                    raise ChannelClosed("put on closed channel")
                self._item = item
                self._has_item = True
                self._taken = False
                self._cond.notify_all()
                while not self._taken:
                    self._cond.wait()
                self._taken = False

    def get(self) -> T:
        """Block until an item is handed over; raise ChannelClosed when done."""
        with self._cond:
            while not self._has_item:
                if self._closed:
                    raise ChannelClosed("channel closed")
                self._cond.wait()
            item = self._item
            self._item = None
            self._has_item = False
            self._taken = True
            self._cond.notify_all()
            return item

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except ChannelClosed:
                return
