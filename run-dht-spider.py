import argparse
import logging
import time

from dht_spider.config import SpiderConfig, parse_address
from dht_spider.constants import (
    DEFAULT_BIND_HOST, DEFAULT_BIND_PORT, DEFAULT_TICK_INTERVAL, ROUTING_TABLE_CAPACITY, BOOTSTRAP_NODES,
)
from dht_spider.dht_spider import DHTSpider

total = 0


def handler(event):
    global total
    total += 1
    print('magnet:?xt=urn:btih:{} from {}:{}'.format(event.info_hash.upper(), event.address, event.port))


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Collect info_hashes announced on the BitTorrent DHT network.')
    parser.add_argument('--host', default=DEFAULT_BIND_HOST, help='UDP address to bind')
    parser.add_argument('--port', type=int, default=DEFAULT_BIND_PORT, help='UDP port to bind')
    parser.add_argument('--interval', type=float, default=DEFAULT_TICK_INTERVAL, help='seconds between two ticks')
    parser.add_argument('--capacity', type=int, default=ROUTING_TABLE_CAPACITY, help='max nodes kept per tick')
    parser.add_argument('--bootstrap', type=parse_address, action='append', metavar='HOST:PORT',
                        help='bootstrap node, may be repeated')
    parser.add_argument('--proxy', default=None, help="proxy URL, e.g. 'socks5://127.0.0.1:1080'")
    parser.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.getLogger().setLevel(args.log_level)

    config = SpiderConfig(
        bind_host=args.host,
        bind_port=args.port,
        tick_interval=args.interval,
        capacity=args.capacity,
        bootstrap_nodes=tuple(args.bootstrap) if args.bootstrap else BOOTSTRAP_NODES,
        proxy=args.proxy,
    )
    dht = DHTSpider(config, callback=handler)

    start = time.time()
    try:
        dht.run()
    except KeyboardInterrupt:
        spend_time = time.time() - start
        print('time={}, total={}, speed={} / sec'.format(spend_time, total, total / spend_time))


if __name__ == '__main__':
    main()
