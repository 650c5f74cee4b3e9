import socket
import time
from enum import Enum
from typing import Callable, Optional

from .collector import AckCollector
from .config import ProbeConfig
from .constants import MARKER_PAYLOAD, TERMINAL_MARKER_PAYLOAD
from .errors import MulticastTestError, SendDataError
from .ledger import AckLedger
from .logger import ConsoleLogger, ILogger, LogLevel
from .report import ProbeReport
from .sockets import open_probe_sender
from .tasks import BackgroundTask


class ProbeKind(Enum):
    MARKER = MARKER_PAYLOAD
    TERMINAL_MARKER = TERMINAL_MARKER_PAYLOAD

    @property
    def payload(self) -> bytes:
        return self.value


def probe_kind(index: int, total: int) -> ProbeKind:
    # Advisory only, the receiver counts datagrams and never looks at the content.
    return ProbeKind.TERMINAL_MARKER if index == total - 1 else ProbeKind.MARKER


class ProbeEmitter:
    def __init__(self, config: ProbeConfig, ledger: AckLedger, logger: Optional[ILogger] = None,
                 sock: Optional[socket.socket] = None, sleep: Callable[[float], None] = time.sleep):
        self.config = config
        self.ledger = ledger
        self.logger = logger or ConsoleLogger()
        self.sock = sock
        self.sleep = sleep
        self.sent = 0

    def open(self) -> socket.socket:
        if self.sock is None:
            self.logger.log(LogLevel.INFO, "Emitter", "Creating announcement socket...")
            self.sock = open_probe_sender(self.config.bind_ip, self.config.port, self.config.multicast_ttl)
        return self.sock

    def send_batch(self):
        """
        Sends one probe per ledger slot to the group, pausing send_interval after each.
        The first failed send aborts the batch.
        """
        sock = self.open()
        total = len(self.ledger)
        dest = self.config.group_addr
        self.logger.log(LogLevel.INFO, "Emitter", f"Sending a set of {total} multicast packets to {dest[0]}:{dest[1]}...")
        for index in range(total):
            kind = probe_kind(index, total)
            try:
                sock.sendto(kind.payload, dest)
            except OSError as e:
                raise SendDataError(e) from e
            self.sent += 1
            self.logger.log(LogLevel.INFO, "Emitter", f"Sending packet {index + 1}...")
            if self.config.packet_dump:
                self._dump_packet(index, kind)
            self.sleep(self.config.send_interval)

    def run(self, collector: AckCollector, collector_task: BackgroundTask) -> ProbeReport:
        """
        Sends the batch, ends the collector and reads the ledger once it has been joined.
        """
        try:
            self.send_batch()
        except MulticastTestError:
            collector.stop()
            self._reap(collector_task)
            raise
        finally:
            self.close()
        collector.stop()
        collector_task.join()
        return ProbeReport(self.ledger.snapshot())

    def _reap(self, collector_task: BackgroundTask):
        # The batch already failed; a collector failure on top of it is only logged.
        try:
            collector_task.join()
        except MulticastTestError as e:
            self.logger.log(LogLevel.WARN, "Emitter", f"Response listener also failed: {e}")

    def close(self):
        if self.sock:
            try: self.sock.close()
            except OSError: pass

    def _dump_packet(self, index: int, kind: ProbeKind):
        self.logger.log(LogLevel.DEBUG, "DUMP", f"probe {index} kind={kind.name} len={len(kind.payload)} data={kind.payload!r}")
