# -*- coding: utf-8 -*-
from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from typing import Deque, List

SUCCESS = "success"
WARNING = "warning"
ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: str
    message: str

    def to_dict(self) -> dict:
        return {"type": self.level, "message": self.message}


class Notifier:
    """Operator-facing notices, drained by the page (bounded, thread-safe)."""

    def __init__(self, maxlen: int = 50):
        self._lock = threading.Lock()
        self._pending: Deque[Notice] = deque(maxlen=maxlen)

    def push(self, level: str, message: str) -> Notice:
        n = Notice(level=level, message=message)
        with self._lock:
            self._pending.append(n)
        return n

    def success(self, message: str) -> Notice:
        return self.push(SUCCESS, message)

    def warning(self, message: str) -> Notice:
        return self.push(WARNING, message)

    def error(self, message: str) -> Notice:
        return self.push(ERROR, message)

    def peek(self) -> List[Notice]:
        with self._lock:
            return list(self._pending)

    def drain(self) -> List[Notice]:
        with self._lock:
            out = list(self._pending)
            self._pending.clear()
            return out
