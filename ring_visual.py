# ring_visual.py

import numpy as np
import matplotlib.pyplot as plt
from config import DEMO_SERVERS, DEMO_KEYS, VIRTUAL_NODES
from hashing_ring import RING_SIZE, ConsistentHashRing, hash_key


def get_virtual_nodes_map(ring):
    ring_map = {}
    for node in ring.nodes:
        ring_map[node] = ring.virtual_nodes_of(node)
    return ring_map


def show_ring_adj_list(ring):
    print("\n HASH RING VIRTUAL NODES (Adjacency List Style)\n")
    ring_map = get_virtual_nodes_map(ring)

    for node in sorted(ring_map):
        print(f"{node}:")
        for vnode, h in sorted(ring_map[node], key=lambda x: x[1]):
            print(f"  ↳ {vnode} -> hash: {h}")
        print()


def _angle(position):
    return 2 * np.pi * position / RING_SIZE


def plot_ring(ring, keys=(), path=None):
    """Draw the ring as a circle: virtual nodes on the rim, keys inside."""
    fig, ax = plt.subplots(subplot_kw={"projection": "polar"})
    ax.set_theta_zero_location("N")
    ax.set_theta_direction(-1)
    ax.set_yticklabels([])

    for node, vnodes in sorted(get_virtual_nodes_map(ring).items()):
        angles = [_angle(h) for _, h in vnodes]
        ax.scatter(angles, np.ones(len(angles)), label=node, s=60)

    for key in keys:
        angle = _angle(hash_key(key))
        ax.scatter([angle], [0.7], marker="x", color="black")
        ax.annotate(key, (angle, 0.7), fontsize=7)

    ax.set_ylim(0, 1.1)
    ax.set_title("Hash Ring")
    ax.legend(loc="upper right", bbox_to_anchor=(1.3, 1.1))
    if path:
        fig.savefig(path, bbox_inches="tight")
        plt.close(fig)
    else:
        plt.show()
    return fig


if __name__ == "__main__":
    ring = ConsistentHashRing(DEMO_SERVERS, vnodes=VIRTUAL_NODES)
    show_ring_adj_list(ring)
    plot_ring(ring, DEMO_KEYS)
