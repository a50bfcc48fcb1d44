# hashing_ring.py

import hashlib
import bisect
import logging
from config import VIRTUAL_NODES, VNODE_SEPARATOR
from key_ledger import KeyLedger

log = logging.getLogger(__name__)

RING_SIZE = 2 ** 32


class RingError(Exception):
    """Base class for hash ring errors."""


class RingEmpty(RingError, LookupError):
    """A lookup was made while no node is on the ring."""

    def __init__(self, message="hash ring has no nodes"):
        super().__init__(message)


class KeyLossOnRemoval(RingEmpty):
    """The last node was removed while it still owned keys.

    The removal itself has gone through: the ring is empty and the keys
    listed in ``keys`` are no longer recorded anywhere. Add a node and
    assign them again to get them back on the ring.
    """

    def __init__(self, node, keys):
        self.node = node
        self.keys = list(keys)
        super().__init__(
            f"removed last node {node}, dropped {len(self.keys)} key(s): {self.keys}"
        )


def hash_key(key):
    """Position of ``key`` on the ring: first 4 bytes of its MD5 digest,
    big-endian, so always in ``0 .. RING_SIZE - 1``."""
    if isinstance(key, str):
        key = key.encode("utf-8")
    digest = hashlib.md5(key).digest()
    return int.from_bytes(digest[:4], "big")


class RingIndex:
    """Hash positions in ascending order, each mapped to the node owning it."""

    def __init__(self):
        self.ring = {}          # position -> node
        self.sorted_keys = []

    def insert(self, position, node):
        # last write wins on a collision; the displaced owner is handed back
        previous = self.ring.get(position)
        if position not in self.ring:
            bisect.insort(self.sorted_keys, position)
        self.ring[position] = node
        return previous

    def remove(self, position):
        if position not in self.ring:
            return None
        idx = bisect.bisect_left(self.sorted_keys, position)
        self.sorted_keys.pop(idx)
        return self.ring.pop(position)

    def owner_of(self, position):
        if not self.sorted_keys:
            raise RingEmpty()
        idx = bisect.bisect_left(self.sorted_keys, position)
        if idx == len(self.sorted_keys):
            idx = 0
        return self.ring[self.sorted_keys[idx]]

    def successor(self, position, skip=None):
        """First entry strictly after ``position`` (wrapping around) whose
        owner is not ``skip``. None if there is no such entry."""
        count = len(self.sorted_keys)
        start = bisect.bisect_right(self.sorted_keys, position)
        for i in range(count):
            h = self.sorted_keys[(start + i) % count]
            node = self.ring[h]
            if node != skip:
                return h, node
        return None

    def positions(self):
        return list(self.sorted_keys)

    def nodes(self):
        return set(self.ring.values())

    def __iter__(self):
        for h in list(self.sorted_keys):
            yield h, self.ring[h]

    def __len__(self):
        return len(self.sorted_keys)

    def __contains__(self, position):
        return position in self.ring


class ConsistentHashRing:
    """Consistent hash ring with virtual nodes and a ledger of assigned keys.

    Every node is placed on the ring ``vnodes`` times. A key belongs to the
    node owning the first position at or after the key's hash, wrapping
    around past the largest position. Keys handed to :meth:`assign_key` are
    recorded per node, and membership changes move only the keys whose
    owner actually changed.

    Not thread safe: callers must serialize every mutating call.
    """

    def __init__(self, nodes=None, vnodes=VIRTUAL_NODES):
        if isinstance(vnodes, bool) or not isinstance(vnodes, int) or vnodes < 1:
            raise ValueError(f"vnodes must be a positive integer, got {vnodes!r}")
        self.vnodes = vnodes
        self._index = RingIndex()
        self._ledger = KeyLedger()

        for node in nodes or []:
            self.add_node(node)

    def vnode_name(self, node, replica):
        return f"{node}{VNODE_SEPARATOR}{replica}"

    def virtual_nodes_of(self, node):
        vnodes = []
        for i in range(self.vnodes):
            name = self.vnode_name(node, i)
            vnodes.append((name, hash_key(name)))
        return vnodes

    # Membership

    def add_node(self, node):
        """Place ``node`` on the ring and pull over the keys it now owns.

        Adding a node that is already present re-inserts its positions and
        leaves its keys alone. Returns ``{key: node}`` for every moved key.
        """
        self._ledger.register(node)
        displaced = []
        for vnode, h in self.virtual_nodes_of(node):
            previous = self._index.insert(h, node)
            if previous is not None and previous != node:
                log.warning("Virtual node %s collides with %s at %d, overwriting", vnode, previous, h)
                displaced.append(previous)
            log.debug("Added virtual node %s with hash %d", vnode, h)
        log.info("Added node %s (%d vnodes)", node, self.vnodes)
        return self.migrate_on_add(node, displaced)

    def remove_node(self, node):
        """Take ``node`` off the ring and re-home its keys.

        Unknown nodes are ignored. Returns ``{key: new_owner}``. Raises
        :class:`KeyLossOnRemoval` when this was the last node and it held
        keys.
        """
        if node not in self._ledger:
            log.debug("Node %s is not on the ring, nothing to remove", node)
            return {}
        for vnode, h in self.virtual_nodes_of(node):
            self._index.remove(h)
            log.debug("Removed virtual node %s with hash %d", vnode, h)
        log.info("Removed node %s (cleaned %d vnodes)", node, self.vnodes)
        return self.migrate_on_remove(node)

    # Migration

    def migrate_on_add(self, new_node, displaced=()):
        # The keys new_node can take over sit on the nodes that owned its
        # positions before it arrived: the next foreign entry after each
        # position, plus any node whose entry it overwrote.
        sources = []
        for _, h in self.virtual_nodes_of(new_node):
            entry = self._index.successor(h, skip=new_node)
            if entry is not None and entry[1] not in sources:
                sources.append(entry[1])
        for node in displaced:
            if node not in sources:
                sources.append(node)

        moved = {}
        for source in sources:
            for key in self._ledger.get(source):
                if self.get_node(key) != new_node:
                    continue
                self._ledger.discard(source, key)
                self._ledger.add(new_node, key)
                moved[key] = new_node
                log.debug("Key %s reassigned from %s to %s", key, source, new_node)
        if moved:
            log.info("Moved %d key(s) to %s", len(moved), new_node)
        return moved

    def migrate_on_remove(self, node):
        keys = self._ledger.pop(node)
        if not keys:
            log.debug("No keys were assigned to %s", node)
            return {}
        if not self._index:
            log.warning("Removed last node %s, dropping keys %s", node, keys)
            raise KeyLossOnRemoval(node, keys)

        moved = {}
        for key in keys:
            owner = self.get_node(key)
            self._ledger.add(owner, key)
            moved[key] = owner
            log.debug("Key %s reassigned from %s to %s", key, node, owner)
        log.info("Re-homed %d key(s) from %s", len(moved), node)
        return moved

    # Keys

    def assign_key(self, key):
        owner = self.get_node(key)
        if self._ledger.add(owner, key):
            log.debug("Assigned key %s to %s", key, owner)
        return owner

    def remove_key(self, key):
        node = self._ledger.locate(key)
        if node is None:
            return False
        self._ledger.discard(node, key)
        log.debug("Removed key %s from %s", key, node)
        return True

    def get_node(self, key):
        return self._index.owner_of(hash_key(key))

    def owner_of(self, position):
        return self._index.owner_of(position)

    # Inspection

    def keys_of(self, node):
        return self._ledger.get(node)

    def locate(self, key):
        """Node the ledger has ``key`` recorded on, or None."""
        return self._ledger.locate(key)

    def distribution(self):
        return self._ledger.snapshot()

    def key_count(self):
        return self._ledger.total()

    def ring_entries(self):
        return list(self._index)

    @property
    def nodes(self):
        return self._ledger.nodes()

    def __len__(self):
        return len(self._ledger.nodes())

    def __contains__(self, node):
        return node in self._ledger
