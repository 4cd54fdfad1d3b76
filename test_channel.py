#!/usr/bin/env python3
"""
Tests for the unbuffered task channel.
"""

import sys
import threading
import time
from pathlib import Path

import pytest

# Add the src directory to the path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from waybackdocs.core.channel import TaskChannel
from waybackdocs.core.exceptions import ChannelClosed


def test_put_blocks_until_taken():
    channel = TaskChannel()
    returned = threading.Event()

    def producer():
        channel.put("a")
        returned.set()

    t = threading.Thread(target=producer)
    t.start()
    # Nobody is receiving yet: put must not return
    assert not returned.wait(0.2)
    assert channel.get() == "a"
    assert returned.wait(2)
    t.join(2)


def test_close_ends_iteration_for_every_receiver():
    channel = TaskChannel()
    received = []
    lock = threading.Lock()

    def consumer():
        for item in channel:
            with lock:
                received.append(item)

    consumers = [threading.Thread(target=consumer) for _ in range(3)]
    for c in consumers:
        c.start()
    for i in range(10):
        channel.put(i)
    channel.close()
    for c in consumers:
        c.join(2)
        assert not c.is_alive()

    # Each item delivered exactly once
    assert sorted(received) == list(range(10))


def test_items_are_handed_out_in_order():
    channel = TaskChannel()
    received = []

    def consumer():
        for item in channel:
            received.append(item)
            time.sleep(0.001)

    c = threading.Thread(target=consumer)
    c.start()
    for i in range(20):
        channel.put(i)
    channel.close()
    c.join(2)
    assert received == list(range(20))


def test_operations_after_close():
    channel = TaskChannel()
    channel.close()
    channel.close()  # idempotent
    assert channel.closed
    with pytest.raises(ChannelClosed):
        channel.get()
    with pytest.raises(ChannelClosed):
        channel.put("late")
    assert list(channel) == []


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-q"]))
