import matplotlib
matplotlib.use("Agg")

import pytest
import hashing_ring
from hashing_ring import ConsistentHashRing


@pytest.fixture
def fixed_positions(monkeypatch):
    """Pin ring positions by name so tests can lay the ring out by hand.

    Returns the mapping; tests fill it before adding nodes or keys.
    """
    positions = {}
    monkeypatch.setattr(hashing_ring, "hash_key", lambda key: positions[key])
    return positions


@pytest.fixture
def demo_ring():
    ring = ConsistentHashRing(vnodes=3)
    for server in ("Server1", "Server2", "Server3"):
        ring.add_node(server)
    for key in ("Key1", "Key2", "Key3", "Key4", "Key5"):
        ring.assign_key(key)
    return ring
