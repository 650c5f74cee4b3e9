import socket
from typing import Callable, Optional, Tuple

from .config import ProbeConfig
from .constants import ACK_PAYLOAD, BATCH_SIZE, RECV_BUFFER_SIZE
from .errors import PeerConnectionError, ReadDataError, SendDataError
from .logger import ConsoleLogger, ILogger, LogLevel
from .sockets import open_group_receiver

Connector = Callable[[Tuple[str, int]], socket.socket]


def _connect(addr: Tuple[str, int]) -> socket.socket:
    return socket.create_connection(addr)


class MulticastListener:
    """
    Receiver side of the probe protocol.

    Every datagram from the group is answered with a TCP acknowledgment sent to
    the datagram's source address. A failed write is fatal, like every other
    socket failure in the session.
    """
    def __init__(self, config: ProbeConfig, logger: Optional[ILogger] = None,
                 sock: Optional[socket.socket] = None, connect: Connector = _connect,
                 batch_size: int = BATCH_SIZE):
        self.config = config
        self.logger = logger or ConsoleLogger()
        self.sock = sock
        self.connect = connect
        self.batch_size = batch_size
        self.acknowledged = 0

    def join_group(self) -> socket.socket:
        if self.sock is None:
            self.sock = open_group_receiver(self.config.group, self.config.port, self.config.bind_ip)
            self.logger.log(LogLevel.INFO, "Listener", f"Joined {self.config.group}:{self.config.port} on {self.config.bind_ip}")
        return self.sock

    def run(self) -> int:
        sock = self.join_group()
        try:
            for _ in range(self.batch_size):
                try:
                    data, addr = sock.recvfrom(RECV_BUFFER_SIZE)
                except OSError as e:
                    raise ReadDataError(e) from e
                self.logger.log(LogLevel.INFO, "Listener", "Received a packet from the broadcaster!")
                if self.config.packet_dump:
                    self._dump_packet(data, addr)
                self.acknowledge(addr[0])
        finally:
            self.close()
        return self.acknowledged

    def acknowledge(self, caster_ip: str):
        target = (caster_ip, self.config.port)
        try:
            conn = self.connect(target)
        except OSError as e:
            raise PeerConnectionError(e) from e
        with conn:
            try:
                conn.sendall(ACK_PAYLOAD)
            except OSError as e:
                raise SendDataError(e) from e
        self.acknowledged += 1
        self.logger.log(LogLevel.DEBUG, "Listener", f"Acknowledged to {target[0]}:{target[1]} ({self.acknowledged}/{self.batch_size})")

    def close(self):
        if self.sock:
            try: self.sock.close()
            except OSError: pass

    def _dump_packet(self, data: bytes, addr):
        self.logger.log(LogLevel.DEBUG, "DUMP", f"datagram from {addr[0]}:{addr[1]} len={len(data)} data={data[:64]!r}")
