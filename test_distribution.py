import pytest
from distribution import (key_distribution, load_stats, ownership_share,
                          plot_distribution, sample_keys)
from hashing_ring import ConsistentHashRing
from ring_visual import get_virtual_nodes_map, plot_ring, show_ring_adj_list


def test_key_distribution_counts_every_key():
    ring = ConsistentHashRing(["node1", "node2", "node3", "node4"], vnodes=100)
    keys = sample_keys(1000)
    distribution = key_distribution(ring, keys)

    assert set(distribution) == {"node1", "node2", "node3", "node4"}
    assert sum(distribution.values()) == 1000
    # 100 vnodes per node keeps every node well away from empty
    assert min(distribution.values()) > 100


def test_key_distribution_does_not_touch_the_ledger():
    ring = ConsistentHashRing(["a", "b"], vnodes=5)
    key_distribution(ring, sample_keys(20))
    assert ring.key_count() == 0


def test_load_stats():
    stats = load_stats({"a": 2, "b": 4})
    assert stats["mean"] == 3.0
    assert stats["std"] == 1.0
    assert stats["min"] == 2 and stats["max"] == 4
    assert stats["cv"] == pytest.approx(1 / 3)


def test_load_stats_empty():
    assert load_stats({}) == {"mean": 0.0, "std": 0.0, "min": 0, "max": 0, "cv": 0.0}


def test_ownership_share_covers_whole_ring():
    ring = ConsistentHashRing(["a", "b", "c"], vnodes=20)
    share = ownership_share(ring)
    assert set(share) == {"a", "b", "c"}
    assert sum(share.values()) == pytest.approx(1.0)
    assert all(0 < part < 1 for part in share.values())


def test_ownership_share_single_node_and_empty():
    assert ownership_share(ConsistentHashRing(["solo"], vnodes=4)) == {"solo": pytest.approx(1.0)}
    assert ownership_share(ConsistentHashRing()) == {}


def test_plot_distribution_writes_file(tmp_path):
    path = tmp_path / "dist.png"
    plot_distribution({"a": 3, "b": 5}, path=str(path))
    assert path.exists() and path.stat().st_size > 0


def test_virtual_nodes_map_and_listing(capsys):
    ring = ConsistentHashRing(["s1", "s2"], vnodes=3)
    ring_map = get_virtual_nodes_map(ring)
    assert [name for name, _ in ring_map["s1"]] == ["s1_VN_0", "s1_VN_1", "s1_VN_2"]

    show_ring_adj_list(ring)
    out = capsys.readouterr().out
    assert "s2_VN_1" in out
    assert out.index("s1:") < out.index("s2:")


def test_plot_ring_writes_file(tmp_path):
    ring = ConsistentHashRing(["s1", "s2"], vnodes=3)
    path = tmp_path / "ring.png"
    plot_ring(ring, ["Key1", "Key2"], path=str(path))
    assert path.exists() and path.stat().st_size > 0
