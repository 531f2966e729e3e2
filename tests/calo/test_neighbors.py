"""Tests for the lazily computed cross-module neighbor graph."""

import pytest

from calosel.calo import ChannelTopologyIndex
from calosel.contracts import IndexOutOfRange

pytestmark = pytest.mark.unit


def neighbor_triples(index, triple):
    return {index.triple_of(n) for n in index.channel_neighbors(index.linear_index(*triple))}


class TestChannelNeighbors:

    def test_barrel_interior(self, topology):
        """Same-iphi towers share a module, so only the iphi +-1 columns remain."""
        assert neighbor_triples(topology, (1, 5, 10)) == {
            (1, 4, 9), (1, 4, 11),
            (1, 5, 9), (1, 5, 11),
            (1, 6, 9), (1, 6, 11),
        }

    def test_ring_zero_is_skipped(self, topology):
        assert neighbor_triples(topology, (1, 1, 10)) == {
            (1, -1, 9), (1, -1, 10), (1, -1, 11),
            (1, 1, 9), (1, 1, 11),
            (1, 2, 9), (1, 2, 11),
        }

    def test_azimuth_wraps(self, topology):
        first = topology.linear_index(1, 5, 1)
        last = topology.linear_index(1, 5, 72)
        assert last in topology.channel_neighbors(first)
        assert first in topology.channel_neighbors(last)

    def test_neighbors_share_depth(self, topology):
        i = topology.linear_index(2, 16, 30)
        for n in topology.channel_neighbors(i):
            assert topology.triple_of(n).depth == 2

    def test_never_same_module(self, topology):
        for i in range(len(topology)):
            module = topology.module_of(i)
            for n in topology.channel_neighbors(i):
                assert topology.module_of(n) != module

    def test_relation_is_symmetric(self, topology):
        for i in range(len(topology)):
            for n in topology.channel_neighbors(i):
                assert i in topology.channel_neighbors(n)

    def test_neighbor_lists_sorted(self, topology):
        for i in range(0, len(topology), 11):
            neighbors = topology.channel_neighbors(i)
            assert list(neighbors) == sorted(set(neighbors))

    def test_out_of_range(self, topology):
        with pytest.raises(IndexOutOfRange):
            topology.channel_neighbors(len(topology))

    def test_channel_set_neighbors_is_union(self, topology):
        a = topology.linear_index(1, 5, 10)
        b = topology.linear_index(1, 5, 20)
        union = set(topology.channel_neighbors(a)) | set(topology.channel_neighbors(b))
        assert topology.channel_set_neighbors([a, b]) == tuple(sorted(union))


class TestModuleNeighbors:

    def test_barrel_module(self, topology):
        """Barrel+ column iphi=10 touches its azimuthal neighbors, barrel- and endcap+."""
        module = topology.module_of(topology.linear_index(1, 5, 10))
        assert module == 11
        assert topology.module_neighbors(module) == (10, 12, 82, 83, 84, 154, 155, 156)

    def test_sorted_unique_and_excludes_self(self, topology):
        for m in range(topology.n_modules):
            neighbors = topology.module_neighbors(m)
            assert list(neighbors) == sorted(set(neighbors))
            assert m not in neighbors

    def test_boundary_channels_belong_to_other_modules(self, topology):
        module = 11
        boundary = topology.module_boundary_channels(module)
        assert boundary
        assert all(topology.module_of(i) != module for i in boundary)
        assert {topology.module_of(i) for i in boundary} == set(topology.module_neighbors(module))

    def test_out_of_range(self, topology):
        with pytest.raises(IndexOutOfRange):
            topology.module_neighbors(topology.n_modules)


class TestLifecycle:

    def test_lazy_until_requested(self):
        index = ChannelTopologyIndex.build()
        assert not index.neighbors_ready
        index.channel_neighbors(0)
        assert not index.neighbors_ready

    def test_ensure_neighbors_computed_is_idempotent(self):
        index = ChannelTopologyIndex.build()
        index.ensure_neighbors_computed()
        assert index.neighbors_ready
        table = index._channel_neighbors
        index.ensure_neighbors_computed()
        assert index._channel_neighbors is table

    def test_warm_and_lazy_agree(self):
        warm = ChannelTopologyIndex.build()
        warm.ensure_neighbors_computed()
        lazy = ChannelTopologyIndex.build()
        for i in range(0, len(warm), 97):
            assert warm.channel_neighbors(i) == lazy.channel_neighbors(i)
        assert warm.module_neighbors(5) == lazy.module_neighbors(5)
