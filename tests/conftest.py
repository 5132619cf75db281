"""
DHT spider test fixtures
"""

import ipaddress
import socket
from struct import pack

import pytest

from dht_spider import codec
from dht_spider.config import SpiderConfig
from dht_spider.dht_spider import DHTSpider


class FakeTransport:
    """In-memory transport recording every sent message."""

    def __init__(self):
        self.sent = []
        self.opened = False
        self.closed = False

    def open(self):
        self.opened = True

    def send(self, data, address):
        self.sent.append((codec.decode(data), address))

    def receive(self):
        return None

    def close(self):
        self.closed = True


def compact_node(nid: bytes, host: str, port: int) -> bytes:
    return nid + socket.inet_aton(host) + pack('!H', port)


HOSTS = {
    'router.example.org': '198.51.100.1',
    'dht.example.org': '198.51.100.2',
}


@pytest.fixture(autouse=True)
def fake_resolver(monkeypatch):
    """Resolve the test bootstrap hostnames without DNS."""
    def gethostbyname(host):
        try:
            ipaddress.ip_address(host)
            return host
        except ValueError:
            pass
        if host not in HOSTS:
            raise socket.gaierror(socket.EAI_NONAME, 'Name or service not known')
        return HOSTS[host]

    monkeypatch.setattr(socket, 'gethostbyname', gethostbyname)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
def config() -> SpiderConfig:
    return SpiderConfig(
        bind_host='192.0.2.1',
        bind_port=6881,
        tick_interval=0.01,
        capacity=200,
        bootstrap_nodes=(('router.example.org', 6881), ('dht.example.org', 6881)),
    )


@pytest.fixture
def spider(config, transport, events) -> DHTSpider:
    return DHTSpider(config, callback=events.append, transport=transport)
