import socket
import threading
from typing import Optional

from .errors import ReadDataError
from .ledger import AckLedger
from .logger import ConsoleLogger, ILogger, LogLevel
from .sockets import open_ack_listener

# How often a waiting accept() wakes up to check whether the batch is over
POLL_INTERVAL = 0.1


class AckCollector:
    """
    Accepts one TCP connection per acknowledgment and marks the ledger in arrival order.

    Acks carry no probe identifier, so the n-th connection fills slot n whichever
    probe the receiver was answering. The collector ends once every slot is
    filled, or once stop() was called and no connection is waiting to be accepted.
    """
    def __init__(self, ledger: AckLedger, bind_ip: str, port: int,
                 logger: Optional[ILogger] = None, sock: Optional[socket.socket] = None,
                 poll_interval: float = POLL_INTERVAL):
        self.ledger = ledger
        self.bind_ip = bind_ip
        self.port = port
        self.logger = logger or ConsoleLogger()
        self.sock = sock
        self.poll_interval = poll_interval
        self._stopping = threading.Event()

    def bind(self) -> socket.socket:
        if self.sock is None:
            self.sock = open_ack_listener(self.bind_ip, self.port, backlog=len(self.ledger))
            self.logger.log(LogLevel.INFO, "Collector", f"Listening for acknowledgments on {self.bind_ip}:{self.local_port}")
        return self.sock

    @property
    def local_port(self) -> int:
        return self.sock.getsockname()[1] if self.sock else self.port

    def stop(self):
        """Ends the session once the connections already queued have been read."""
        self._stopping.set()

    def run(self):
        sock = self.bind()
        sock.settimeout(self.poll_interval)
        try:
            while self.ledger.next_free() is not None:
                try:
                    conn, addr = sock.accept()
                except socket.timeout:
                    if self._stopping.is_set():
                        break
                    continue
                except OSError as e:
                    raise ReadDataError(e) from e
                with conn:
                    # Accepted sockets are blocking regardless of the listener timeout
                    conn.settimeout(None)
                    size = self._drain(conn)
                slot = self.ledger.next_free()
                self.ledger.mark(slot)
                self.logger.log(LogLevel.INFO, "Collector", f"Response from {addr[0]} recorded in slot {slot} ({size} bytes)")
        finally:
            self.close()
        self.logger.log(LogLevel.INFO, "Collector", f"Collected {self.ledger.acknowledged_count()}/{len(self.ledger)} responses")

    @staticmethod
    def _drain(conn: socket.socket) -> int:
        total = 0
        while True:
            try:
                chunk = conn.recv(4096)
            except OSError as e:
                raise ReadDataError(e) from e
            if not chunk:
                return total
            total += len(chunk)

    def close(self):
        if self.sock:
            try: self.sock.close()
            except OSError: pass
