from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from .ledger import SlotState


class Verdict(Enum):
    WORKING = "working"
    PARTIALLY_WORKING = "partially working"
    NOT_WORKING = "not working"


VERDICT_LINES = {
    Verdict.WORKING: [
        "Multicast across the two devices is working!",
    ],
    Verdict.NOT_WORKING: [
        "Multicast across the two devices is not working...",
        "If you're trying to multicast from a wireless device to Ethernet, then this is probably to be expected, sadly.",
    ],
    Verdict.PARTIALLY_WORKING: [
        "Multicast appears to be partially working, though there is some packet loss.",
        "If you're testing multicasts between wireless and wired devices, this is a common occurance.",
    ],
}


def classify(acknowledged: int, total: int) -> Verdict:
    if acknowledged == total:
        return Verdict.WORKING
    if acknowledged == 0:
        return Verdict.NOT_WORKING
    return Verdict.PARTIALLY_WORKING


@dataclass(frozen=True)
class ProbeReport:
    slots: Tuple[SlotState, ...]

    @property
    def total(self) -> int:
        return len(self.slots)

    @property
    def acknowledged(self) -> int:
        return sum(1 for s in self.slots if s == SlotState.ACKNOWLEDGED)

    @property
    def verdict(self) -> Verdict:
        return classify(self.acknowledged, self.total)

    def lines(self) -> List[str]:
        out = []
        for index, state in enumerate(self.slots):
            status = "Had Response" if state == SlotState.ACKNOWLEDGED else "No Response"
            out.append(f"Packet {index}: {status}")
        out.append(f"We saw responses to {self.acknowledged}/{self.total} of the multicast packets")
        out.extend(VERDICT_LINES[self.verdict])
        return out
