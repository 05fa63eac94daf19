"""Tests for the reader/writer lock."""

import threading
import time

import pytest

from propconf.utils.locks import ReadWriteLock


class TestReadWriteLock:
    """Test cases for ReadWriteLock."""

    def setup_method(self):
        self.lock = ReadWriteLock()

    def test_multiple_readers(self):
        """Test several readers can hold the lock together."""
        self.lock.acquire_read()
        self.lock.acquire_read()

        assert self.lock.readers == 2

        self.lock.release_read()
        self.lock.release_read()
        assert self.lock.readers == 0

    def test_writer_excludes_readers(self):
        """Test readers wait while a writer holds the lock."""
        acquired = threading.Event()

        def reader():
            with self.lock.read_locked():
                acquired.set()

        with self.lock.write_locked():
            thread = threading.Thread(target=reader)
            thread.start()
            assert not acquired.wait(timeout=0.2)

        assert acquired.wait(timeout=5)
        thread.join(timeout=5)

    def test_writer_waits_for_readers(self):
        """Test a writer waits until all readers are gone."""
        acquired = threading.Event()

        def writer():
            with self.lock.write_locked():
                acquired.set()

        self.lock.acquire_read()
        thread = threading.Thread(target=writer)
        thread.start()
        assert not acquired.wait(timeout=0.2)

        self.lock.release_read()
        assert acquired.wait(timeout=5)
        thread.join(timeout=5)

    def test_waiting_writer_blocks_new_readers(self):
        """Test new readers queue behind a waiting writer."""
        order = []
        writer_waiting = threading.Event()

        def writer():
            writer_waiting.set()
            with self.lock.write_locked():
                order.append("writer")

        def reader():
            with self.lock.read_locked():
                order.append("reader")

        self.lock.acquire_read()
        writer_thread = threading.Thread(target=writer)
        writer_thread.start()
        writer_waiting.wait(timeout=5)
        # Give the writer time to register as waiting
        for _ in range(100):
            if self.lock._writers_waiting:
                break
            time.sleep(0.01)

        reader_thread = threading.Thread(target=reader)
        reader_thread.start()
        reader_thread.join(timeout=0.2)
        assert reader_thread.is_alive()

        self.lock.release_read()
        writer_thread.join(timeout=5)
        reader_thread.join(timeout=5)

        assert order == ["writer", "reader"]

    def test_release_after_exception(self):
        """Test context managers release on error."""
        with pytest.raises(ValueError):
            with self.lock.write_locked():
                raise ValueError("boom")

        assert self.lock.write_held is False
        with self.lock.read_locked():
            assert self.lock.readers == 1

    def test_unbalanced_release_raises(self):
        """Test releasing an unheld lock is an error."""
        with pytest.raises(RuntimeError):
            self.lock.release_read()
        with pytest.raises(RuntimeError):
            self.lock.release_write()
