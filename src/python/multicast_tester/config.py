import dataclasses
import ipaddress
import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from . import constants
from .errors import ConfigError


def parse_ipv4(value: str) -> str:
    """Returns the normalised IPv4 literal, raising ValueError for anything else."""
    addr = ipaddress.IPv4Address(value.strip())
    return str(addr)


@dataclass
class ProbeConfig:
    bind_ip: str
    group: str = constants.MULTICAST_GROUP
    port: int = constants.PORT
    send_interval: float = constants.SEND_INTERVAL
    multicast_ttl: int = constants.MULTICAST_TTL
    packet_dump: bool = False

    def __post_init__(self):
        try:
            self.bind_ip = parse_ipv4(self.bind_ip)
        except (ValueError, AttributeError) as e:
            raise ConfigError(f"bind_ip '{self.bind_ip}' is not an IPv4 address", e)
        if ipaddress.IPv4Address(self.bind_ip).is_multicast:
            raise ConfigError(f"bind_ip '{self.bind_ip}' must be a unicast address")

        try:
            self.group = parse_ipv4(self.group)
        except (ValueError, AttributeError) as e:
            raise ConfigError(f"group '{self.group}' is not an IPv4 address", e)
        if not ipaddress.IPv4Address(self.group).is_multicast:
            raise ConfigError(f"group '{self.group}' is not a multicast address")

        if not isinstance(self.port, int) or not 0 <= self.port <= 0xFFFF:
            raise ConfigError(f"port {self.port!r} out of range")
        if not isinstance(self.send_interval, (int, float)) or self.send_interval < 0:
            raise ConfigError(f"send_interval {self.send_interval!r} must be >= 0")
        if not isinstance(self.multicast_ttl, int) or not 1 <= self.multicast_ttl <= 255:
            raise ConfigError(f"multicast_ttl {self.multicast_ttl!r} must be within 1..255")

    @property
    def group_addr(self):
        return (self.group, self.port)


def load_config_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, 'r') as f: data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"failed to load {path}: {e}", e)
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a JSON object")

    known = {f.name for f in dataclasses.fields(ProbeConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown keys in {path}: {', '.join(unknown)}")
    return data


def build_config(bind_ip: str, path: Optional[str] = None, env: Optional[Mapping[str, str]] = None,
                 **overrides) -> ProbeConfig:
    """
    Layers the settings in order: defaults, JSON file, environment, explicit overrides.
    """
    values: Dict[str, Any] = {}
    if path:
        values.update(load_config_file(path))

    env = os.environ if env is None else env
    if env.get(constants.PACKET_DUMP_ENV) == "1":
        values["packet_dump"] = True

    values.update({k: v for k, v in overrides.items() if v is not None})
    values["bind_ip"] = bind_ip
    return ProbeConfig(**values)
