"""Tests for the topology inspection command."""

import logging

import pytest

from calosel.cli import inspect_topology, load_user_config_dict, main, setup_logging

pytestmark = pytest.mark.unit


@pytest.fixture
def user_config_file(tmp_path, geometry_files):
    hb_path, he_path = geometry_files
    path = tmp_path / "user_config.py"
    path.write_text(
        "CONFIG = {\n"
        f"    'HB_GEOMETRY_FILE': {str(hb_path)!r},\n"
        f"    'HE_GEOMETRY_FILE': {str(he_path)!r},\n"
        "    'CONE_SIZE': 0.4,\n"
        "}\n"
    )
    return path


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLoadUserConfig:

    def test_loads_config_dict(self, user_config_file):
        assert load_user_config_dict(str(user_config_file))["CONE_SIZE"] == 0.4

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_user_config_dict(str(tmp_path / "missing.py"))

    def test_no_config_dict(self, tmp_path):
        path = tmp_path / "empty.py"
        path.write_text("SETTINGS = 1\n")
        with pytest.raises(ValueError, match="No CONFIG dict"):
            load_user_config_dict(str(path))


def test_setup_logging_file_handler(tmp_path):
    log_path = tmp_path / "logs" / "calosel.log"
    setup_logging("DEBUG", str(log_path))
    logging.getLogger("calosel.test").debug("hello")
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "calosel.test - DEBUG - hello" in log_path.read_text()


class TestInspectTopology:

    def test_summary_with_geometry(self, user_config_file):
        summary = inspect_topology(str(user_config_file))
        assert summary["channels"] == 5184
        assert summary["modules"] == 288
        assert summary["racks"] == 72
        assert summary["geometry"]["channels"] == 5184

    def test_skip_geometry_without_config(self):
        summary = inspect_topology(load_geometry=False)
        assert summary["geometry"] is None

    def test_describe_channel(self):
        summary = inspect_topology(load_geometry=False, channel=(1, 5, 1))
        info = summary["channel"]
        assert info["subdetector"] == "HB"
        assert info["module"] == 2
        assert "(depth=1, ieta=5, iphi=72)" in info["neighbors"]

    def test_cli_geometry_override(self, user_config_file, tmp_path):
        with pytest.raises(FileNotFoundError):
            inspect_topology(str(user_config_file), cli_args={"hb_geometry_file": str(tmp_path / "x.ctr")})

    def test_verbose_includes_config(self, user_config_file):
        summary = inspect_topology(str(user_config_file), verbose=True)
        assert summary["config"]["association"]["cone_size"] == 0.4
        assert summary["config"]["logging"]["level"] == "DEBUG"


def test_main_prints_summary(capsys, user_config_file):
    assert main([str(user_config_file), "--channel", "2", "16", "1"]) == 0
    out = capsys.readouterr().out
    assert "Channels: 5184" in out
    assert '"index"' in out


class TestParserOverrides:

    def test_selector_and_log_level_flags(self, capsys):
        assert main(["--skip-geometry", "--channel-selector", "all", "--log-level", "warning"]) == 0
        assert "Selector: all" in capsys.readouterr().out
        assert logging.getLogger().level == logging.WARNING

    def test_store_selected_only_flag(self):
        summary = inspect_topology(load_geometry=False, verbose=True,
                                   cli_args={"store_selected_only": True, "log_level": "ERROR"})
        assert summary["config"]["output"]["store_selected_only"] is True
        assert summary["config"]["logging"]["level"] == "ERROR"

    def test_hardware_map_flag(self, capsys):
        path = "tests.helpers.fake_hardware:OneRackPerSide"
        assert main(["--skip-geometry", "--hardware-map", path]) == 0
        out = capsys.readouterr().out
        assert "Modules:  2" in out
        assert f"Hardware: {path}" in out

    def test_hardware_map_from_user_config(self, tmp_path):
        path = tmp_path / "user_config.py"
        path.write_text("CONFIG = {'HARDWARE_MAP': 'tests.helpers.fake_hardware:OneRackPerSide'}\n")
        summary = inspect_topology(str(path), load_geometry=False)
        assert summary["racks"] == 1
