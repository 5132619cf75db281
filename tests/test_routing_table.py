"""
Routing table tests
"""

from dht_spider.routing_table import RoutingTable
from dht_spider.utils import KNode, get_rand_id


def make_node(i: int) -> KNode:
    return KNode(get_rand_id(), '10.0.{}.{}'.format(i // 256, i % 256), 6881)


class TestRoutingTable:

    def test_push_and_drain(self):
        table = RoutingTable(get_rand_id(), capacity=10)
        nodes = [make_node(i) for i in range(3)]
        for node in nodes:
            table.push(node)

        assert len(table) == 3
        assert table.drain() == nodes
        assert len(table) == 0
        assert table.drain() == []

    def test_never_exceeds_capacity(self):
        table = RoutingTable(get_rand_id(), capacity=5)
        for i in range(50):
            table.push(make_node(i))
            assert len(table) <= 5

    def test_full_table_keeps_first_nodes(self):
        table = RoutingTable(get_rand_id(), capacity=2)
        nodes = [make_node(i) for i in range(4)]
        for node in nodes:
            table.push(node)
        assert table.drain() == nodes[:2]

    def test_accepts_again_after_drain(self):
        table = RoutingTable(get_rand_id(), capacity=1)
        first, second = make_node(1), make_node(2)
        table.push(first)
        table.push(second)
        table.drain()
        table.push(second)
        assert table.drain() == [second]

    def test_default_capacity(self):
        assert RoutingTable(get_rand_id()).capacity == 200
