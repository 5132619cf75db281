import logging
import socket
from queue import Queue, Full
from threading import Thread, Event
from typing import NamedTuple

from . import codec
from . import krpc
from .config import SpiderConfig
from .constants import EVENT_QUEUE_SIZE
from .errors import MalformedMessage, TransportFailure
from .routing_table import RoutingTable
from .transport import UDPTransport
from .utils import get_rand_id

logger = logging.getLogger(__name__)

TICK = 'tick'
DATAGRAM = 'datagram'


class AnnounceEvent(NamedTuple):
    info_hash: str
    address: str
    port: int


class DHTSpider:
    """DHT spider.

    Operating procedures:
        1. Every tick, send `find_node` requests to the bootstrap nodes;
        2. In the same tick, send `find_node` requests to every node discovered since the last tick,
           pretending to be their neighbor, then forget them;
        3. Answer `get_peers` and `announce_peer` requests of the other nodes. Every accepted
           `announce_peer` is reported as an <class AnnounceEvent>.

    Ticks and datagrams are put on one queue and handled one by one by the thread calling `run`,
    which is the only one touching the routing table.
    """

    def __init__(self, config: SpiderConfig=None, callback=None, transport=None):
        """Init.

        :param config: Settings, defaults are used when omitted.
        :param callback: Callback function receiving every <class AnnounceEvent>.
        :param transport: Transport with `open`, `send`, `receive` and `close`. A <class UDPTransport>
                          bound to the configured address is created when omitted.
        """
        self.config = config or SpiderConfig()
        self.callback = callback
        self.nid: bytes = get_rand_id()
        self.routing_table = RoutingTable(self.nid, self.config.capacity)
        if transport is None:
            transport = UDPTransport(self.config.bind_host, self.config.bind_port, proxy=self.config.proxy)
        self.transport = transport
        self.events = Queue(maxsize=EVENT_QUEUE_SIZE)
        self._stopped = Event()

    def run(self) -> None:
        """Starting spider. Blocks until `stop` is called."""

        threads = [Thread(target=self.keep_ticking, daemon=True)]
        try:
            self.transport.open()
        except TransportFailure as e:
            logger.error(str(e))
        else:
            threads.append(Thread(target=self.keep_receiving, daemon=True))

        for thread in threads:
            thread.start()

        try:
            self.process_events()
        finally:
            self._stopped.set()
            self.transport.close()
            for thread in threads:
                thread.join()

    def stop(self) -> None:
        self._stopped.set()
        self.events.put(None)

    def resolve_bootstrap_nodes(self) -> list:
        """Resolve the bootstrap hostnames to IPv4 addresses.
        Runs on the timer thread so that DNS lookups never hold up the event queue.

        :return: List of (ip, port). Hosts which can not be resolved are skipped.
        """
        addresses = []
        for host, port in self.config.bootstrap_nodes:
            try:
                addresses.append((socket.gethostbyname(host), port))
            except OSError as e:
                logger.debug('Can not resolve bootstrap node {}: {}'.format(host, e))
        return addresses

    def keep_ticking(self) -> None:
        while not self._stopped.is_set():
            self._put_nowait((TICK, self.resolve_bootstrap_nodes()))
            if self._stopped.wait(self.config.tick_interval):
                break

    def _put_nowait(self, event: tuple) -> None:
        try:
            self.events.put_nowait(event)
        except Full:
            logger.debug('Event queue is full, dropping {} event'.format(event[0]))

    def keep_receiving(self) -> None:
        while not self._stopped.is_set():
            received = self.transport.receive()
            if received is not None:
                datagram, address = received
                self._put_nowait((DATAGRAM, datagram, address))

    def process_events(self) -> None:
        """Handle queued events until the stop sentinel arrives."""
        while True:
            event = self.events.get()
            if event is None:
                break
            try:
                if event[0] == TICK:
                    self.tick(event[1])
                else:
                    self.handle_datagram(event[1], event[2])
            except Exception:
                logger.exception('Failed to handle {} event'.format(event[0]))

    def _send_krpc(self, msg: dict, address: tuple) -> None:
        """Send messages under KRPC Protocol.

        :param msg: The messages to send.
        :param address: Target address. (host, port)
        :return: None
        """
        self.transport.send(codec.encode(msg), address)

    def send_find_node(self, address: tuple, target_nid: bytes=None) -> None:
        """Send find_node request.

        :param address: Address of the target node. (host, port)
        :param target_nid: Node ID of the target node, if known.
        :return: None
        """
        self._send_krpc(krpc.build_find_node(self.nid, target_nid), address)

    def bootstrap(self, addresses) -> None:
        """Join the DHT network with public nodes.

        :param addresses: Resolved addresses of the bootstrap nodes. (ip, port)
        """
        for address in addresses:
            self.send_find_node(address)

    def tick(self, bootstrap_addresses=()) -> None:
        """Query the bootstrap nodes, then every node found since the last tick.

        :param bootstrap_addresses: Resolved addresses of the bootstrap nodes. (ip, port)
        """
        self.bootstrap(bootstrap_addresses)
        for node in self.routing_table.drain():
            self.send_find_node(node.address, node.nid)

    def handle_datagram(self, datagram: bytes, address: tuple) -> None:
        """Decode and handle a received datagram.

        :param datagram: Raw bytes.
        :param address: The address which the datagram is sent from. (host, port)
        """
        try:
            msg = codec.decode(datagram)
        except MalformedMessage as e:
            logger.debug('Dropping datagram from {}: {}'.format(address, e))
            return
        self._on_message(msg, address)

    def _on_message(self, msg, address: tuple) -> None:
        """Handle received message.

        :param msg: Received message.
        :param address: The address which the message sending from. (host, port)
        """
        if not isinstance(msg, dict):
            return

        msg_type = msg.get(b'y')
        if msg_type == b'r':
            response = msg.get(b'r')
            if isinstance(response, dict) and isinstance(response.get(b'nodes'), bytes) and response[b'nodes']:
                self._on_find_node_response(msg)
        elif msg_type == b'q':
            method = msg.get(b'q')
            if method == b'get_peers':
                self._on_get_peers_request(msg, address)
            elif method == b'announce_peer':
                self._on_announce_peer_request(msg, address)

    def _on_find_node_response(self, msg: dict) -> int:
        """Process `find_node` response.
        Nodes are added to the routing table unless they carry our own address or ID, or an invalid port.

        :param msg: Response message of other DHT node.
        :return: Number of nodes accepted.
        """
        accepted = 0
        for node in krpc.extract_nodes(msg):
            result = krpc.validate_node(node, self.nid, self.config.bind_host)
            if result.ok:
                self.routing_table.push(node)
                accepted += 1
        return accepted

    def _on_get_peers_request(self, msg: dict, address: tuple) -> krpc.Result:
        """Handle `get_peers` request.
        Sending a response with a token, so that the node sends us an `announce_peer` later.

        :param msg: Request message of the other DHT node.
        :param address: Address of the DHT node.
        :return: Validation result.
        """
        result = krpc.validate_get_peers(msg)
        if not result.ok:
            logger.debug('Dropping get_peers from {}: {}'.format(address, result.error))
            return result

        self._send_krpc(krpc.build_get_peers_response(result.value, self.nid), address)
        return result

    def _on_announce_peer_request(self, msg: dict, address: tuple) -> krpc.Result:
        """Handle `announce_peer` request.

        :param msg: Request message of the other DHT node.
        :param address: Address of the DHT node.
        :return: Validation result.
        """
        result = krpc.validate_announce_peer(msg, address[1])
        if not result.ok:
            logger.debug('Dropping announce_peer from {}: {}'.format(address, result.error))
            return result

        query = result.value
        self._send_krpc(krpc.build_announce_peer_response(query, self.nid), address)
        self._handle_announce(AnnounceEvent(query.info_hash.hex(), address[0], address[1]))
        return result

    def _handle_announce(self, event: AnnounceEvent) -> None:
        """Default announce handler.

        :param event: The accepted announce.
        """
        if self.callback:
            self.callback(event)
        else:
            logger.info('magnet:?xt=urn:btih:{} from {}:{}'.format(event.info_hash, event.address, event.port))
