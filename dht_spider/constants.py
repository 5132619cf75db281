# Length of node ID
NODE_ID_LENGTH: int = 20

# Length of transaction ID
TRANSACTION_ID_LENGTH = 4

# Length of token
TOKEN_LENGTH = 2

# Length of "Compact node info": node ID + IPv4 address + port
COMPACT_NODE_LENGTH: int = NODE_ID_LENGTH + 6

# Max number of nodes kept between two ticks
ROUTING_TABLE_CAPACITY: int = 200

# Seconds between two ticks
DEFAULT_TICK_INTERVAL = 1.0

RECEIVE_BUFFER_SIZE = 65536

DEFAULT_BIND_HOST = '0.0.0.0'
DEFAULT_BIND_PORT = 6881

# Public nodes of DHT network
BOOTSTRAP_NODES = (
    ("router.bittorrent.com", 6881),
    ("router.utorrent.com", 6881),
    ("dht.transmissionbt.com", 6881),
)

# Max number of ticks and datagrams waiting to be handled
EVENT_QUEUE_SIZE: int = 10000
