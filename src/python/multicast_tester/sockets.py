import platform
import socket
import struct

from .errors import SocketBindError


def _reuse(s: socket.socket):
    s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    if hasattr(socket, 'SO_REUSEPORT'):
        try:
            s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEPORT, 1)
        except OSError:
            pass


def open_ack_listener(bind_ip: str, port: int, backlog: int = 10) -> socket.socket:
    """TCP listener the broadcaster collects acknowledgments on."""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        s.bind((bind_ip, port))
        s.listen(backlog)
    except OSError as e:
        s.close()
        raise SocketBindError(e) from e
    return s


def open_probe_sender(bind_ip: str, port: int, ttl: int = 1) -> socket.socket:
    """
    UDP socket the probes leave through. Outgoing multicast is pinned to bind_ip
    so the datagrams take the interface the operator asked for.
    """
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    try:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        s.bind((bind_ip, port))
        s.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_IF, socket.inet_aton(bind_ip))
        s.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, ttl)
        s.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_LOOP, 1)
    except OSError as e:
        s.close()
        raise SocketBindError(e) from e
    return s


def open_group_receiver(group: str, port: int, bind_ip: str) -> socket.socket:
    """
    UDP socket joined to the multicast group on the interface owning bind_ip.

    On Linux a socket bound to a unicast address never sees group traffic, so
    it is bound to the group address instead. Other platforms bind the unicast
    address directly.
    Ref: IP_ADD_MEMBERSHIP in https://man7.org/linux/man-pages/man7/ip.7.html
    """
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
    try:
        _reuse(s)
        if platform.system() == "Linux":
            s.bind((group, port))
        else:
            s.bind((bind_ip, port))
        mreq = struct.pack("4s4s", socket.inet_aton(group), socket.inet_aton(bind_ip))
        s.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, mreq)
    except OSError as e:
        s.close()
        raise SocketBindError(e) from e
    return s
