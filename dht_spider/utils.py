import os
import socket
from hashlib import sha1
from struct import unpack

from .constants import NODE_ID_LENGTH, COMPACT_NODE_LENGTH


class KNode:
    """DHT nodes class."""

    def __init__(self, nid: bytes, host: str, port: int):
        """
        :param nid: Node ID
        :param host: IPv4 address of the node
        :param port: Port of the node
        """
        self.nid = nid
        self.host = host
        self.port = port

    @property
    def address(self) -> tuple:
        return self.host, self.port

    def __eq__(self, other):
        if not isinstance(other, KNode):
            return NotImplemented
        return (self.nid, self.host, self.port) == (other.nid, other.host, other.port)

    def __repr__(self):
        return 'KNode(nid={}, host={}, port={})'.format(self.nid.hex(), self.host, self.port)


def get_rand_id(length: int=None) -> bytes:
    """Generate random node ID.
    The ID is the SHA1 digest of fresh random bytes, truncated to `length`.

    :param length: Length of ID.
    """
    if length is None:
        length = NODE_ID_LENGTH
    return sha1(os.urandom(NODE_ID_LENGTH)).digest()[:length]


def get_neighbor_id(target: bytes, nid: bytes, end: int=NODE_ID_LENGTH // 2) -> bytes:
    """Generate an ID which looks like a neighbor of the target node ID.
    The first half is taken from the target and the second half from our own ID. This is not a real
    XOR distance computation, the result only shares a prefix with the target.

    :param target: Target node ID or info_hash
    :param nid: Our own node ID
    :param end: Length of the prefix taken from the target.
    """
    return target[:end] + nid[end:]


def decode_compact_nodes_info(compact_nodes_info: bytes) -> list:
    """Decode Compact node info
    Contact information for nodes is encoded as a 26-byte string. Also known as "Compact node info".
    The 20-byte Node ID in network byte order has the compact IP-address/port info concatenated to the end.

    Trailing bytes which do not fill a whole record are ignored.

    :param compact_nodes_info: Concatenated bytes of several "Compact node info".
    :return: A list of <class KNode> objects.
    """
    nodes_list = []
    for i in range(0, len(compact_nodes_info) - COMPACT_NODE_LENGTH + 1, COMPACT_NODE_LENGTH):
        record = compact_nodes_info[i:i + COMPACT_NODE_LENGTH]
        nid = record[:NODE_ID_LENGTH]
        host = socket.inet_ntoa(record[NODE_ID_LENGTH:NODE_ID_LENGTH + 4])
        port = unpack("!H", record[NODE_ID_LENGTH + 4:])[0]
        nodes_list.append(KNode(nid, host, port))

    return nodes_list
