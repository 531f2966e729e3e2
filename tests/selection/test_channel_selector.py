"""Tests for selector strategies and the selector factory."""

import numpy as np
import pytest

from calosel.contracts import UnsupportedConfiguration
from calosel.selection import (
    AllChannelSelector,
    ChannelEnergyExtractor,
    ClusteringResult,
    JetCandidate,
    JetChannelSelector,
    make_channel_selector,
    transverse_energy,
)
from tests.helpers.fake_event import make_fake_event

pytestmark = pytest.mark.unit


def prepare(event, config, topology):
    """Attach energy and channel_index the way the processor does."""
    ds = ChannelEnergyExtractor(config).attach(event)
    ds["channel_index"] = ("pulse",), topology.linear_indices(
        ds["depth"].values, ds["ieta"].values, ds["iphi"].values
    )
    return ds


def jet_at(geometry, topology, index, triple, pt):
    i = topology.linear_index(*triple)
    return JetCandidate(index, float(geometry.eta[i]), float(geometry.phi[i]), pt)


class TestFactory:

    def test_default_is_jet(self, internal_config, geometry):
        selector = make_channel_selector(internal_config, geometry)
        assert isinstance(selector, JetChannelSelector)
        assert selector.name == "jet"

    def test_all(self, make_config, geometry):
        selector = make_channel_selector(make_config(channel_selector="ALL"), geometry)
        assert isinstance(selector, AllChannelSelector)

    @pytest.mark.parametrize("name, expected", [
        ("FFTJetChannelSelector", JetChannelSelector),
        ("AllChannelSelector", AllChannelSelector),
    ])
    def test_class_name_aliases(self, make_config, geometry, name, expected):
        selector = make_channel_selector(make_config(channel_selector=name), geometry)
        assert isinstance(selector, expected)

    def test_unknown_method(self, make_config, geometry):
        with pytest.raises(UnsupportedConfiguration, match="cluster"):
            make_channel_selector(make_config(channel_selector="cluster"), geometry)


class TestTransverseEnergy:

    def test_energy_times_sin_theta(self, internal_config, topology, geometry):
        ds = prepare(make_fake_event([(1, 20, 1), (1, 1, 1)], [10.0, 10.0]), internal_config, topology)
        et = transverse_energy(ds, geometry)
        idx = ds["channel_index"].values
        np.testing.assert_allclose(et, 10.0 * geometry.sin_theta[idx])
        assert et[0] < et[1]


class TestJetChannelSelector:

    def test_associates_and_prunes(self, internal_config, topology, geometry):
        channels = [(1, 3, 10), (1, 4, 10), (1, 3, 11), (1, -15, 40)]
        energies = [100.0, 50.0, 0.5, 30.0]
        ds = prepare(make_fake_event(channels, energies), internal_config, topology)
        clustering = ClusteringResult([jet_at(geometry, topology, 0, (1, 3, 10), 50.0)])

        mask, jet_pt, jet = JetChannelSelector(internal_config, geometry).select(ds, clustering)

        np.testing.assert_array_equal(mask, [True, True, False, False])
        np.testing.assert_array_equal(jet_pt, [50.0, 50.0, 0.0, 0.0])
        np.testing.assert_array_equal(jet, [0, 0, 0, -1])

    def test_budget_follows_jet_et(self, make_config, topology, geometry):
        channels = [(1, 3, 10), (1, 3, 11)]
        axis = jet_at(geometry, topology, 0, (1, 3, 10), 50.0)
        clustering = ClusteringResult([JetCandidate(0, axis.eta, axis.phi, 50.0, et=200.0)])

        config = make_config()
        ds = prepare(make_fake_event(channels, [100.0, 3.0]), config, topology)
        mask, _, _ = JetChannelSelector(config, geometry).select(ds, clustering)
        np.testing.assert_array_equal(mask, [True, False])

        config = make_config(budget_total="channels")
        mask, _, _ = JetChannelSelector(config, geometry).select(ds, clustering)
        np.testing.assert_array_equal(mask, [True, True])

    def test_jet_reports_candidate_index(self, internal_config, topology, geometry):
        """Candidates are sorted by index; ``jet`` holds the index, not the position."""
        channels = [(1, 3, 10), (1, -10, 50)]
        ds = prepare(make_fake_event(channels, [40.0, 40.0]), internal_config, topology)
        clustering = ClusteringResult([
            jet_at(geometry, topology, 9, (1, -10, 50), 60.0),
            jet_at(geometry, topology, 4, (1, 3, 10), 30.0),
        ])

        mask, jet_pt, jet = JetChannelSelector(internal_config, geometry).select(ds, clustering)

        np.testing.assert_array_equal(jet, [4, 9])
        np.testing.assert_array_equal(jet_pt, [30.0, 60.0])
        assert mask.all()

    def test_soft_jet_channels_dropped(self, internal_config, topology, geometry):
        ds = prepare(make_fake_event([(1, -10, 50)], [40.0]), internal_config, topology)
        clustering = ClusteringResult([jet_at(geometry, topology, 0, (1, -10, 50), 5.0)])

        selector = JetChannelSelector(internal_config, geometry)
        mask, jet_pt, jet = selector.select(ds, clustering)

        assert not mask.any()
        np.testing.assert_array_equal(jet, [0])
        assert selector.good_jet_count(clustering) == 0

    def test_no_jets(self, internal_config, topology, geometry):
        ds = prepare(make_fake_event([(1, 1, 1)], [40.0]), internal_config, topology)
        mask, jet_pt, jet = JetChannelSelector(internal_config, geometry).select(ds, ClusteringResult())
        assert not mask.any()
        np.testing.assert_array_equal(jet, [-1])


class TestAllChannelSelector:

    def test_selects_everything(self, internal_config, topology):
        ds = prepare(make_fake_event([(1, 1, 1), (2, 16, 3)], [1.0, 2.0]), internal_config, topology)
        clustering = ClusteringResult([JetCandidate(0, 0.0, 0.0, 50.0)])

        selector = AllChannelSelector()
        mask, jet_pt, jet = selector.select(ds, clustering)

        assert mask.all()
        assert not jet_pt.any()
        np.testing.assert_array_equal(jet, [-1, -1])
        assert selector.good_jet_count(clustering) == 1
