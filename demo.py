# demo.py
import argparse
import logging
import functools
from config import (VIRTUAL_NODES, DEMO_SERVERS, DEMO_KEYS, DEMO_NEW_SERVER,
                    DEMO_REMOVED_SERVER, DISTRIBUTION_SAMPLE_KEYS)
from hashing_ring import ConsistentHashRing, KeyLossOnRemoval, RingEmpty, hash_key
from distribution import key_distribution, print_distribution, sample_keys
from ring_visual import plot_ring
print = functools.partial(print, flush=True)


class LiveDemo:
    def __init__(self, vnodes=VIRTUAL_NODES):
        self.ring = ConsistentHashRing(vnodes=vnodes)

    def add_servers(self, servers):
        for server in servers:
            print(f"[Demo] Adding {server}")
            moved = self.ring.add_node(server)
            for key in moved:
                print(f"[Demo]   {key} moved to {server}")

    def remove_server(self, server):
        print(f"[Demo] Removing {server}")
        try:
            moved = self.ring.remove_node(server)
        except KeyLossOnRemoval as e:
            print(f"[Demo] Lost keys {e.keys}: no server left to hold them")
            return
        for key, owner in moved.items():
            print(f"[Demo]   {key} moved from {server} to {owner}")

    def assign_keys(self, keys):
        for key in keys:
            try:
                owner = self.ring.assign_key(key)
            except RingEmpty:
                print(f"[Demo] Cannot assign {key}: ring is empty")
                continue
            print(f"[Demo] Assigned key {key} to {owner}")

    def display(self, heading):
        print(f"\n{heading}")
        print("=" * 60)
        print(f"│ {'Server'.ljust(10)} │ {'Keys'.ljust(43)} │")
        print("=" * 60)
        for server, keys in self.ring.distribution().items():
            print(f"│ {server.ljust(10)} │ {', '.join(keys).ljust(43)} │")
        print("=" * 60)

    def display_keys(self):
        print("=" * 60)
        print(f"│ {'Key'.ljust(10)} │ {'Hash'.ljust(12)} │ {'Owner'.ljust(10)} │ {'Ledger'.ljust(14)} │")
        print("=" * 60)
        for key in sorted(k for keys in self.ring.distribution().values() for k in keys):
            owner = self.ring.get_node(key)
            recorded = self.ring.locate(key) or "-"
            print(f"│ {key.ljust(10)} │ {str(hash_key(key)).ljust(12)} │ {owner.ljust(10)} │ {recorded.ljust(14)} │")
        print("=" * 60)
        print(f"Servers: {len(self.ring)}  Virtual nodes per server: {self.ring.vnodes}")
        print("=" * 60)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Consistent hashing ring demo")
    parser.add_argument("--vnodes", type=int, default=VIRTUAL_NODES,
                        help="Virtual nodes per server")
    parser.add_argument("--servers", nargs="+", default=DEMO_SERVERS,
                        help="Servers to start with")
    parser.add_argument("--keys", nargs="+", default=DEMO_KEYS, help="Keys to assign")
    parser.add_argument("--add", default=DEMO_NEW_SERVER, help="Server to add afterwards")
    parser.add_argument("--remove", default=DEMO_REMOVED_SERVER, help="Server to remove last")
    parser.add_argument("--stats", action="store_true",
                        help=f"Print load statistics over {DISTRIBUTION_SAMPLE_KEYS} sample keys")
    parser.add_argument("--plot", metavar="PATH", help="Save a picture of the final ring")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log ring activity")
    args = parser.parse_args(argv)
    if args.vnodes < 1:
        parser.error("--vnodes must be at least 1")
    return args


def main(argv=None):
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(asctime)s - %(levelname)s - %(message)s')

    demo = LiveDemo(args.vnodes)
    demo.add_servers(args.servers)
    demo.assign_keys(args.keys)
    demo.display("Initial Key Distribution:")

    if args.add:
        print(f"\nAdding {args.add}...\n")
        demo.add_servers([args.add])
        demo.display("Updated Key Distribution:")

    if args.remove:
        print(f"\nRemoving {args.remove}...\n")
        demo.remove_server(args.remove)
        demo.display("Final Key Distribution:")

    print()
    demo.display_keys()

    if args.stats and len(demo.ring):
        print("\n Distribution Analysis:")
        print_distribution(key_distribution(demo.ring, sample_keys()))

    if args.plot:
        plot_ring(demo.ring, args.keys, path=args.plot)
        print(f"Ring picture written to {args.plot}")
    return demo


if __name__ == "__main__":
    main()
