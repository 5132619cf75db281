from .constants import ROUTING_TABLE_CAPACITY


class RoutingTable:
    """Bounded list of the nodes discovered since the last tick.

    Nodes are only accepted while there is room left, there is no eviction. The whole table is
    handed out and emptied once per tick by `drain`.
    """

    def __init__(self, nid: bytes, capacity: int=ROUTING_TABLE_CAPACITY):
        """
        :param nid: Our own node ID.
        :param capacity: Max number of nodes.
        """
        self.nid = nid
        self.capacity = capacity
        self.nodes = []

    def push(self, node) -> None:
        if len(self.nodes) >= self.capacity:
            return
        self.nodes.append(node)

    def drain(self) -> list:
        """Return the current nodes and empty the table."""
        nodes, self.nodes = self.nodes, []
        return nodes

    def __len__(self):
        return len(self.nodes)
