"""
Node ID and compact node info tests
"""

import os

import pytest

from dht_spider.utils import KNode, get_rand_id, get_neighbor_id, decode_compact_nodes_info
from conftest import compact_node


class TestRandomID:

    def test_default_length(self):
        assert len(get_rand_id()) == 20

    def test_truncated_length(self):
        assert len(get_rand_id(4)) == 4

    def test_ids_differ(self):
        assert len({get_rand_id() for _ in range(50)}) == 50


class TestNeighborID:

    @pytest.mark.parametrize('_', range(20))
    def test_splices_target_prefix_and_own_suffix(self, _):
        target = os.urandom(20)
        nid = os.urandom(20)
        neighbor = get_neighbor_id(target, nid)
        assert len(neighbor) == 20
        assert neighbor[:10] == target[:10]
        assert neighbor[10:] == nid[10:]

    def test_known_values(self):
        target = bytes(range(20))
        nid = bytes(range(100, 120))
        assert get_neighbor_id(target, nid) == bytes(range(10)) + bytes(range(110, 120))


class TestDecodeCompactNodes:

    def test_decodes_every_record(self):
        nodes = [KNode(os.urandom(20), '10.0.0.{}'.format(i), 1000 + i) for i in range(1, 6)]
        raw = b''.join(compact_node(n.nid, n.host, n.port) for n in nodes)
        assert decode_compact_nodes_info(raw) == nodes

    def test_port_is_big_endian(self):
        raw = b'\x01' * 20 + bytes([127, 0, 0, 1]) + b'\x1a\xe1'
        node, = decode_compact_nodes_info(raw)
        assert node.host == '127.0.0.1'
        assert node.port == 6881

    def test_length_is_multiple_of_record(self):
        raw = os.urandom(26 * 7)
        nodes = decode_compact_nodes_info(raw)
        assert len(nodes) == 7
        for i, node in enumerate(nodes):
            record = raw[i * 26:(i + 1) * 26]
            assert node.nid == record[:20]
            assert node.host == '.'.join(str(b) for b in record[20:24])
            assert node.port == int.from_bytes(record[24:], 'big')

    def test_trailing_bytes_ignored(self):
        raw = compact_node(b'\x02' * 20, '10.1.2.3', 51413) + b'\x00' * 25
        nodes = decode_compact_nodes_info(raw)
        assert nodes == [KNode(b'\x02' * 20, '10.1.2.3', 51413)]

    def test_short_input(self):
        assert decode_compact_nodes_info(b'') == []
        assert decode_compact_nodes_info(b'\x00' * 25) == []
