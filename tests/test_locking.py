"""
Tests for the reader/writer lock.
"""

import threading

from jsonconfig.utils.locking import ReadWriteLock


class TestReadWriteLock:
    """Reader sharing and writer exclusion."""

    def test_readers_share_the_lock(self):
        lock = ReadWriteLock()
        inside = threading.Barrier(3, timeout=5.0)
        errors = []

        def reader():
            with lock.read_locked():
                try:
                    # all three readers must hold the lock at once to pass
                    inside.wait()
                except threading.BrokenBarrierError as e:
                    errors.append(e)

        threads = [threading.Thread(target=reader) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10.0)

        assert errors == []

    def test_writer_waits_for_readers(self):
        lock = ReadWriteLock()
        events = []
        reader_in = threading.Event()
        release_reader = threading.Event()

        def reader():
            with lock.read_locked():
                reader_in.set()
                release_reader.wait(5.0)
                events.append("reader done")

        def writer():
            with lock.write_locked():
                events.append("writer in")

        reader_thread = threading.Thread(target=reader)
        reader_thread.start()
        assert reader_in.wait(5.0)

        writer_thread = threading.Thread(target=writer)
        writer_thread.start()
        writer_thread.join(timeout=0.2)
        assert writer_thread.is_alive()

        release_reader.set()
        reader_thread.join(timeout=5.0)
        writer_thread.join(timeout=5.0)

        assert events == ["reader done", "writer in"]

    def test_waiting_writer_blocks_new_readers(self):
        lock = ReadWriteLock()
        lock.acquire_read()
        order = []

        writer = threading.Thread(target=lambda: (lock.acquire_write(), order.append("writer"), lock.release_write()))
        writer.start()
        # let the writer queue up behind the held read lock
        while not lock._writers_waiting:
            writer.join(timeout=0.01)

        reader = threading.Thread(target=lambda: (lock.acquire_read(), order.append("reader"), lock.release_read()))
        reader.start()
        reader.join(timeout=0.2)
        assert reader.is_alive()

        lock.release_read()
        writer.join(timeout=5.0)
        reader.join(timeout=5.0)

        assert order == ["writer", "reader"]

    def test_concurrent_updates_are_consistent(self):
        lock = ReadWriteLock()
        state = {"a": 0, "b": 0}
        mismatches = []
        stop = threading.Event()

        def writer():
            for i in range(500):
                with lock.write_locked():
                    state["a"] = i
                    state["b"] = i

        def reader():
            while not stop.is_set():
                with lock.read_locked():
                    if state["a"] != state["b"]:
                        mismatches.append((state["a"], state["b"]))

        readers = [threading.Thread(target=reader) for _ in range(4)]
        writers = [threading.Thread(target=writer) for _ in range(2)]
        for thread in readers + writers:
            thread.start()
        for thread in writers:
            thread.join()
        stop.set()
        for thread in readers:
            thread.join()

        assert mismatches == []
