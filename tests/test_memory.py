"""Tests for SharedMemory and the private Scratchpad."""

import threading

from agentpipe.memory import Scratchpad, SharedMemory


def test_put_then_get_returns_value():
    memory = SharedMemory()
    payload = {"nested": [1, 2, 3]}
    memory.put("key", payload)

    assert memory.get("key") is payload
    assert memory.contains("key")
    assert "key" in memory


def test_missing_key_returns_default_without_raising():
    memory = SharedMemory()

    assert memory.get("missing") is None
    assert memory.get("missing", "fallback") == "fallback"
    assert not memory.contains("missing")


def test_put_overwrites_and_none_still_counts_as_set():
    memory = SharedMemory()
    memory.put("key", "first")
    memory.put("key", None)

    assert memory.get("key", "fallback") is None
    assert memory.contains("key")
    assert len(memory) == 1


def test_snapshot_is_a_copy():
    memory = SharedMemory({"a": 1})
    snap = memory.snapshot()
    snap["b"] = 2

    assert memory.keys() == ["a"]
    assert sorted(memory) == ["a"]


def test_update_is_atomic_across_threads():
    memory = SharedMemory()
    threads_count = 8
    increments = 1000

    def worker():
        for _ in range(increments):
            memory.update("counter", lambda n: n + 1, default=0)

    threads = [threading.Thread(target=worker) for _ in range(threads_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert memory.get("counter") == threads_count * increments


def test_concurrent_puts_on_distinct_keys_are_all_visible():
    memory = SharedMemory()

    def writer(prefix: str):
        for i in range(200):
            memory.put(f"{prefix}-{i}", i)

    threads = [threading.Thread(target=writer, args=(f"t{n}",)) for n in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(memory) == 6 * 200
    assert memory.get("t5-199") == 199


def test_scratchpad_remember_recall_clear():
    pad = Scratchpad()
    pad.remember("last_output", "hi")

    assert pad.recall("last_output") == "hi"
    assert pad.recall("other", 3) == 3

    pad.clear()
    assert pad.state == {}
