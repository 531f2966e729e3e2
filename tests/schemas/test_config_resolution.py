"""Tests for layered configuration resolution (Param < User < CLI)."""

import pytest
from pydantic import ValidationError

from calosel.schemas import CLIConfig, InternalConfig, ParamConfig, UserConfig, resolve_config
from calosel.calo import DEFAULT_HARDWARE_MAP
from calosel.schemas.resolve import deep_merge

pytestmark = pytest.mark.unit


class TestDefaults:

    def test_param_defaults(self, internal_config):
        assert isinstance(internal_config, InternalConfig)
        assert internal_config.geometry.hb_file == "Geometry/hb.ctr"
        assert internal_config.geometry.he_file == "Geometry/he.ctr"
        assert internal_config.topology.hardware_map == DEFAULT_HARDWARE_MAP
        assert internal_config.selector.method == "jet"
        assert internal_config.association.cone_size == 0.5
        assert internal_config.association.eta_to_phi_ratio == 1.0
        assert internal_config.association.metric == "elliptic"
        assert internal_config.pruning.et_fraction_cutoff == 0.02
        assert internal_config.pruning.jet_pt_cutoff == 20.0
        assert internal_config.pruning.budget_total == "jet"
        assert internal_config.extractor.min_response_ts == 3
        assert internal_config.extractor.max_response_ts == 8
        assert internal_config.extractor.n_time_slices == 10
        assert internal_config.output.store_selected_only is False
        assert internal_config.logging.level == "INFO"
        assert internal_config.processor.warm_neighbor_cache is True

    def test_dict_inputs(self):
        config = resolve_config({}, {"CONE_SIZE": 0.3}, {"log_level": "DEBUG"})
        assert config.association.cone_size == 0.3
        assert config.logging.level == "DEBUG"

    def test_internal_config_is_frozen(self, internal_config):
        with pytest.raises(ValidationError):
            internal_config.selector = internal_config.selector


class TestUserConfig:

    def test_uppercase_aliases(self):
        raw = {
            "HB_GEOMETRY_FILE": "/data/hb.ctr",
            "CHANNEL_SELECTOR": " All ",
            "CONE_SIZE": 1,
            "CONE_METRIC": "Euclidean",
            "JET_PT_CUTOFF": 30,
            "ET_FRACTION_CUTOFF": 0.05,
            "MIN_RESPONSE_TS": 2,
            "MAX_RESPONSE_TS": 6,
            "STORE_SELECTED_ONLY": True,
            "BUDGET_TOTAL": "Channels",
            "HARDWARE_MAP": "tests.helpers.fake_hardware:OneRackPerSide",
        }
        user = UserConfig.model_validate(raw)
        assert isinstance(user.cone_size, float) and user.cone_size == 1.0

        config = resolve_config(ParamConfig(), user)
        assert config.geometry.hb_file == "/data/hb.ctr"
        assert config.geometry.he_file == "Geometry/he.ctr"
        assert config.selector.method == "all"
        assert config.association.metric == "euclidean"
        assert config.pruning.jet_pt_cutoff == 30.0
        assert config.pruning.et_fraction_cutoff == 0.05
        assert (config.extractor.min_response_ts, config.extractor.max_response_ts) == (2, 6)
        assert config.output.store_selected_only is True
        assert config.pruning.budget_total == "channels"
        assert config.topology.hardware_map == "tests.helpers.fake_hardware:OneRackPerSide"

    def test_field_names_accepted(self):
        user = UserConfig(cone_size=0.4, jet_pt_cutoff=25)
        assert resolve_config(ParamConfig(), user).association.cone_size == 0.4

    def test_unknown_keys_are_ignored(self):
        user = UserConfig.model_validate({"CONE_SIZE": 0.4, "RADAR_ID": "KHTX"})
        assert user.cone_size == 0.4
        assert not hasattr(user, "RADAR_ID")

    def test_nested_section_wins_over_alias(self):
        user = UserConfig.model_validate({
            "CONE_SIZE": 0.4,
            "association": {"cone_size": 0.7},
            "extractor": {"n_time_slices": 12},
        })
        config = resolve_config(ParamConfig(), user)
        assert config.association.cone_size == 0.7
        assert config.extractor.n_time_slices == 12

    def test_nested_section_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            UserConfig.model_validate({"pruning": {"pt_floor": 3}})

    @pytest.mark.parametrize("raw", [
        {"CONE_SIZE": 0},
        {"ETA_TO_PHI_RATIO": -1},
        {"ET_FRACTION_CUTOFF": 1.0},
        {"JET_PT_CUTOFF": -5},
        {"CONE_METRIC": "manhattan"},
        {"LOG_LEVEL": "LOUD"},
        {"BUDGET_TOTAL": "event"},
    ])
    def test_invalid_values(self, raw):
        with pytest.raises(ValidationError):
            resolve_config(ParamConfig(), UserConfig.model_validate(raw))


class TestCLIConfig:

    def test_cli_overrides_user(self):
        user = UserConfig.model_validate({"CHANNEL_SELECTOR": "jet", "HB_GEOMETRY_FILE": "user_hb.ctr"})
        cli = CLIConfig(channel_selector="all", hb_geometry_file="cli_hb.ctr")

        config = resolve_config(ParamConfig(), user, cli)

        assert config.selector.method == "all"
        assert config.geometry.hb_file == "cli_hb.ctr"
        # User model is untouched
        assert user.channel_selector == "jet"

    def test_cli_hardware_map_overrides_user(self):
        user = UserConfig.model_validate({"HARDWARE_MAP": "user.maps:Wiring"})
        cli = CLIConfig(hardware_map="cli.maps:Wiring")
        assert resolve_config(ParamConfig(), user, cli).topology.hardware_map == "cli.maps:Wiring"

    def test_cli_preserves_unrelated_user_values(self):
        user = UserConfig.model_validate({"CONE_SIZE": 0.4})
        config = resolve_config(ParamConfig(), user, CLIConfig(log_level="WARNING"))
        assert config.association.cone_size == 0.4
        assert config.logging.level == "WARNING"

    def test_empty_cli_has_no_overrides(self):
        assert CLIConfig().to_internal_overrides() == {}

    def test_cli_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            CLIConfig(cone_size=0.4)


def test_deep_merge():
    base = {"a": 1, "b": {"c": 2, "d": 3}}
    override = {"b": {"d": 4, "e": 5}, "f": 6}
    assert deep_merge(base, override) == {"a": 1, "b": {"c": 2, "d": 4, "e": 5}, "f": 6}
    assert base == {"a": 1, "b": {"c": 2, "d": 3}}
