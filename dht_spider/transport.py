import logging
import socket
import socks
from urllib.parse import urlparse

from .constants import RECEIVE_BUFFER_SIZE
from .errors import TransportFailure

logger = logging.getLogger(__name__)


class UDPTransport:
    """UDP socket of the spider.

    Only `open` raises. Failed sends are dropped and a closed transport neither sends nor
    receives anything.
    """

    def __init__(self, bind_host: str, bind_port: int, proxy: str=None, timeout: float=1.0):
        """Init.

        :param bind_host: UDP ip/hostname.
        :param bind_port: UDP port.
        :param proxy: Proxy for UDP connection. Only support SOCKS4, SOCKS5, HTTP. 'socks5://127.0.0.1:1080'
        :param timeout: Seconds `receive` waits for a datagram.
        """
        self.bind_host = bind_host
        self.bind_port = bind_port
        self.proxy = proxy
        self.timeout = timeout
        self.udp = None

    @property
    def is_open(self) -> bool:
        return self.udp is not None

    def _create_socket(self):
        parsed = urlparse(self.proxy or '')
        if parsed.scheme.upper() in socks.PROXY_TYPES and parsed.hostname and parsed.port:
            proxy_type = socks.PROXY_TYPES[parsed.scheme.upper()]
            udp = socks.socksocket(family=socket.AF_INET, type=socket.SOCK_DGRAM)
            udp.set_proxy(proxy_type, parsed.hostname, parsed.port)
        else:
            udp = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        return udp

    def open(self) -> None:
        """Create and bind the socket.

        :raises TransportFailure: If the socket can not be bound.
        """
        udp = self._create_socket()
        try:
            udp.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            udp.settimeout(self.timeout)
            udp.bind((self.bind_host, self.bind_port))
        except OSError as e:
            udp.close()
            raise TransportFailure("Can not bind UDP socket to {}:{}: {}".format(self.bind_host, self.bind_port, e)) from e

        self.udp = udp
        logger.info('UDP Server listening on {}:{}'.format(self.bind_host, self.bind_port))

    def send(self, data: bytes, address: tuple) -> None:
        """Send a datagram, failures are dropped.

        :param data: Encoded message.
        :param address: Target address. (host, port)
        """
        udp = self.udp
        if udp is None:
            return
        try:
            udp.sendto(data, address)
        except OSError as e:
            logger.debug('Sending to {} failed: {}'.format(address, e))

    def receive(self):
        """Wait for a datagram.

        :return: (datagram, (host, port)), or None if nothing arrived in time.
        """
        udp = self.udp
        if udp is None:
            return None
        try:
            return udp.recvfrom(RECEIVE_BUFFER_SIZE)
        except socket.timeout:
            return None
        except OSError as e:
            logger.debug('Receiving failed: {}'.format(e))
            return None

    def close(self) -> None:
        udp, self.udp = self.udp, None
        if udp is not None:
            udp.close()
