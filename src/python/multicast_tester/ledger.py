import threading
from enum import IntEnum
from typing import List, Optional, Tuple

from .constants import BATCH_SIZE


class SlotState(IntEnum):
    UNACKNOWLEDGED = 0
    ACKNOWLEDGED = 1


class AckLedger:
    """
    Records which of the probe slots have been acknowledged.

    The collector thread is the only writer and each slot is written at most once.
    The emitter reads the whole ledger once, after joining the collector.
    """
    def __init__(self, size: int = BATCH_SIZE):
        self._lock = threading.Lock()
        self._slots: List[SlotState] = [SlotState.UNACKNOWLEDGED] * size

    def __len__(self) -> int:
        return len(self._slots)

    def mark(self, index: int):
        if not 0 <= index < len(self._slots):
            raise IndexError(f"slot {index} outside 0..{len(self._slots) - 1}")
        with self._lock:
            if self._slots[index] == SlotState.ACKNOWLEDGED:
                raise ValueError(f"slot {index} already acknowledged")
            self._slots[index] = SlotState.ACKNOWLEDGED

    def next_free(self) -> Optional[int]:
        with self._lock:
            for i, state in enumerate(self._slots):
                if state == SlotState.UNACKNOWLEDGED:
                    return i
        return None

    def snapshot(self) -> Tuple[SlotState, ...]:
        with self._lock:
            return tuple(self._slots)

    def acknowledged_count(self) -> int:
        return sum(1 for s in self.snapshot() if s == SlotState.ACKNOWLEDGED)
