"""
读写锁模块
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """
    读写锁：多个读者共享，或一个写者独占

    写者优先：有写者等待时，新的读者排在写者之后。
    不可重入，持有读锁时不要再申请写锁。
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """在共享（读）锁内执行"""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """在独占（写）锁内执行"""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
