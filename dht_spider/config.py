from typing import NamedTuple, Tuple

from .constants import (
    DEFAULT_BIND_HOST, DEFAULT_BIND_PORT, DEFAULT_TICK_INTERVAL, ROUTING_TABLE_CAPACITY, BOOTSTRAP_NODES,
)


class SpiderConfig(NamedTuple):
    """Settings of a <class DHTSpider>.

    :param bind_host: UDP ip address. Nodes announcing this address are never queried.
    :param bind_port: UDP port.
    :param tick_interval: Seconds between two ticks.
    :param capacity: Max number of nodes kept between two ticks.
    :param bootstrap_nodes: (host, port) pairs queried on every tick.
    :param proxy: Proxy for UDP connection. 'socks5://127.0.0.1:1080'
    """
    bind_host: str = DEFAULT_BIND_HOST
    bind_port: int = DEFAULT_BIND_PORT
    tick_interval: float = DEFAULT_TICK_INTERVAL
    capacity: int = ROUTING_TABLE_CAPACITY
    bootstrap_nodes: Tuple[Tuple[str, int], ...] = BOOTSTRAP_NODES
    proxy: str = None


def parse_address(value: str) -> tuple:
    """Parse 'host:port'.

    :raises ValueError: If the port is missing or not a number in 1..65535.
    """
    host, sep, port = value.rpartition(':')
    if not sep or not host:
        raise ValueError('Expected host:port, got {!r}'.format(value))
    port = int(port)
    if not 1 <= port <= 65535:
        raise ValueError('Port out of range: {}'.format(port))
    return host, port
