import socket
from typing import List, Optional, Tuple

import psutil

# Most "physical" names first
PRIORITY_KEYWORDS = ['eth', 'en', 'wlan', 'ethernet', 'wi-fi', 'veth']


def list_ipv4_interfaces(include_loopback: bool = False) -> List[Tuple[str, str]]:
    """Returns (interface name, IPv4 address) for every interface that is up."""
    addrs = psutil.net_if_addrs()
    stats = psutil.net_if_stats()
    found = []
    for nic, addr_list in addrs.items():
        if nic not in stats or not stats[nic].isup:
            continue
        for addr in addr_list:
            if addr.family != socket.AF_INET:
                continue
            if addr.address.startswith("127.") and not include_loopback:
                continue
            found.append((nic, addr.address))
    return found


def guess_primary_ipv4() -> Optional[str]:
    """
    Best guess at the address the operator wants to test from, or None when
    no non-loopback interface is up.
    """
    found = list_ipv4_interfaces()
    for keyword in PRIORITY_KEYWORDS:
        for nic, ip in found:
            if keyword in nic.lower():
                return ip
    if found:
        return found[0][1]
    return None
