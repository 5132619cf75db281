"""KRPC messages used by the spider.

For more information, please visit <http://www.bittorrent.org/beps/bep_0005.html>.

Inbound queries are checked by the `validate_*` functions, which never raise on bad input and
return a `Result` instead. A rejected result carries the error explaining why the message was
dropped.
"""
from typing import NamedTuple

from .constants import NODE_ID_LENGTH, TRANSACTION_ID_LENGTH, TOKEN_LENGTH
from .errors import KRPCError, MalformedMessage, InvalidFieldValue
from .utils import get_rand_id, get_neighbor_id, decode_compact_nodes_info

MIN_PORT = 1
MAX_PORT = 65535


class Result(NamedTuple):
    value: object = None
    error: KRPCError = None

    @property
    def ok(self) -> bool:
        return self.error is None


def accept(value) -> Result:
    return Result(value=value)


def reject(error: KRPCError) -> Result:
    return Result(error=error)


class GetPeersQuery(NamedTuple):
    tid: bytes
    nid: bytes
    info_hash: bytes


class AnnouncePeerQuery(NamedTuple):
    tid: bytes
    nid: bytes
    info_hash: bytes
    port: int


def make_token(info_hash: bytes) -> bytes:
    return info_hash[:TOKEN_LENGTH]


def is_valid_port(port) -> bool:
    return isinstance(port, int) and MIN_PORT <= port <= MAX_PORT


def _has_length(value, length: int) -> bool:
    return isinstance(value, bytes) and len(value) == length


def build_find_node(nid: bytes, target_nid: bytes=None) -> dict:
    """Build a `find_node` query.
    When the node we are asking is known, we pretend to be one of its neighbors.

    :param nid: Our own node ID.
    :param target_nid: Node ID of the node the query is sent to, if known.
    :return: The query message.
    """
    return {
        b't': get_rand_id(TRANSACTION_ID_LENGTH),
        b'y': b'q',
        b'q': b'find_node',
        b'a': {
            b'id': get_neighbor_id(target_nid, nid) if target_nid else nid,
            b'target': get_rand_id(),
        },
    }


def build_get_peers_response(query: GetPeersQuery, nid: bytes) -> dict:
    return {
        b't': query.tid,
        b'y': b'r',
        b'r': {
            b'id': get_neighbor_id(query.info_hash, nid),
            b'nodes': b'',
            b'token': make_token(query.info_hash),
        },
    }


def build_announce_peer_response(query: AnnouncePeerQuery, nid: bytes) -> dict:
    return {
        b't': query.tid,
        b'y': b'r',
        b'r': {b'id': get_neighbor_id(query.nid, nid)},
    }


def extract_nodes(msg: dict) -> list:
    """Decode the compact nodes of a `find_node` response."""
    return decode_compact_nodes_info(msg[b'r'][b'nodes'])


def _arguments(msg: dict):
    if not isinstance(msg.get(b't'), bytes):
        return reject(MalformedMessage('missing transaction id'))
    arguments = msg.get(b'a')
    if not isinstance(arguments, dict):
        return reject(MalformedMessage('missing arguments'))
    return accept(arguments)


def validate_get_peers(msg: dict) -> Result:
    """Check a `get_peers` query.

    :param msg: Decoded query.
    :return: Result carrying a <class GetPeersQuery>.
    """
    result = _arguments(msg)
    if not result.ok:
        return result
    arguments = result.value

    info_hash = arguments.get(b'info_hash')
    if not _has_length(info_hash, NODE_ID_LENGTH):
        return reject(MalformedMessage('info_hash must be {} bytes'.format(NODE_ID_LENGTH)))
    querying_nid = arguments.get(b'id')
    if not _has_length(querying_nid, NODE_ID_LENGTH):
        return reject(MalformedMessage('id must be {} bytes'.format(NODE_ID_LENGTH)))

    return accept(GetPeersQuery(msg[b't'], querying_nid, info_hash))


def resolve_announced_port(arguments: dict, source_port: int):
    """Port the announcing peer listens on.
    A non-zero `implied_port` means the source port of the datagram, `port` is ignored then.
    """
    implied_port = arguments.get(b'implied_port')
    if implied_port is not None and implied_port != 0:
        return source_port
    return arguments.get(b'port', 0)


def validate_announce_peer(msg: dict, source_port: int) -> Result:
    """Check an `announce_peer` query.
    The token is expected to be the one we would hand out for the info_hash in a `get_peers`
    response. It is recomputed, never looked up.

    :param msg: Decoded query.
    :param source_port: Source port of the datagram.
    :return: Result carrying a <class AnnouncePeerQuery>.
    """
    result = _arguments(msg)
    if not result.ok:
        return result
    arguments = result.value

    info_hash = arguments.get(b'info_hash')
    if not _has_length(info_hash, NODE_ID_LENGTH):
        return reject(MalformedMessage('info_hash must be {} bytes'.format(NODE_ID_LENGTH)))
    querying_nid = arguments.get(b'id')
    if not _has_length(querying_nid, NODE_ID_LENGTH):
        return reject(MalformedMessage('id must be {} bytes'.format(NODE_ID_LENGTH)))
    token = arguments.get(b'token')
    if not isinstance(token, bytes):
        return reject(MalformedMessage('missing token'))
    if token != make_token(info_hash):
        return reject(InvalidFieldValue('token mismatch'))

    port = resolve_announced_port(arguments, source_port)
    if not is_valid_port(port):
        return reject(InvalidFieldValue('port out of range: {!r}'.format(port)))

    return accept(AnnouncePeerQuery(msg[b't'], querying_nid, info_hash, port))


def validate_node(node, nid: bytes, bind_host: str) -> Result:
    """Check a node found in a `find_node` response before it joins the routing table.

    :param node: <class KNode> object.
    :param nid: Our own node ID.
    :param bind_host: Address our socket is bound to.
    """
    if node.host == bind_host:
        return reject(InvalidFieldValue('node has our own address'))
    if node.nid == nid:
        return reject(InvalidFieldValue('node has our own ID'))
    if not is_valid_port(node.port):
        return reject(InvalidFieldValue('port out of range: {}'.format(node.port)))
    return accept(node)
