# distribution.py

import numpy as np
import matplotlib.pyplot as plt
from hashing_ring import RING_SIZE, ConsistentHashRing
from config import DISTRIBUTION_SAMPLE_KEYS, DEMO_SERVERS, VIRTUAL_NODES


def sample_keys(count=DISTRIBUTION_SAMPLE_KEYS):
    return [f"key_{i}" for i in range(count)]


def key_distribution(ring, keys):
    """Count how many of ``keys`` each node on ``ring`` would own."""
    distribution = {node: 0 for node in ring.nodes}
    for key in keys:
        owner = ring.get_node(key)
        distribution[owner] = distribution.get(owner, 0) + 1
    return distribution


def load_stats(distribution):
    counts = np.array(list(distribution.values()), dtype=float)
    if counts.size == 0:
        return {"mean": 0.0, "std": 0.0, "min": 0, "max": 0, "cv": 0.0}
    mean = counts.mean()
    std = counts.std()
    return {
        "mean": float(mean),
        "std": float(std),
        "min": int(counts.min()),
        "max": int(counts.max()),
        "cv": float(std / mean) if mean else 0.0,
    }


def ownership_share(ring):
    """Fraction of the hash space each node owns.

    A position owns the arc from the previous position (exclusive) up to
    itself; the first position also owns the wrap-around arc.
    """
    entries = ring.ring_entries()
    if not entries:
        return {}
    positions = np.array([h for h, _ in entries], dtype=np.int64)
    arcs = np.diff(positions, prepend=positions[-1] - RING_SIZE)

    share = {node: 0.0 for node in ring.nodes}
    for (_, node), arc in zip(entries, arcs):
        share[node] = share.get(node, 0.0) + float(arc) / RING_SIZE
    return share


def plot_distribution(distribution, path=None, title="Key Distribution Across Nodes"):
    fig, ax = plt.subplots()
    ax.bar(list(distribution.keys()), list(distribution.values()))
    ax.set_title(title)
    ax.set_ylabel("Number of Keys")
    if path:
        fig.savefig(path)
        plt.close(fig)
    else:
        plt.show()
    return fig


def print_distribution(distribution):
    total = sum(distribution.values()) or 1
    for node, count in distribution.items():
        print(f"{node}: {count} keys ({count * 100 / total:.1f}%)")
    stats = load_stats(distribution)
    print(f"mean={stats['mean']:.1f} std={stats['std']:.1f} "
          f"min={stats['min']} max={stats['max']} cv={stats['cv']:.3f}")


if __name__ == "__main__":
    ring = ConsistentHashRing(DEMO_SERVERS, vnodes=VIRTUAL_NODES)
    distribution = key_distribution(ring, sample_keys())
    print("\n Distribution Analysis:")
    print_distribution(distribution)
    plot_distribution(distribution)
