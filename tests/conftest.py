"""Root-level pytest fixtures for the calosel test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture, plus a shared topology index and synthetic geometry.
All tests must use these fixtures instead of creating raw dict configs.
"""

import pytest

from calosel.calo import ChannelGeometry, ChannelTopologyIndex
from calosel.schemas import ParamConfig, UserConfig, resolve_config
from tests.helpers.fake_geometry import make_fake_geometry_rows, write_fake_geometry_files


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults.

    Use this as the base for all test configs. Override specific values
    using make_config or by creating custom UserConfig instances.
    """
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides)."""
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_custom_cone(make_config):
    ...     config = make_config(cone_size=0.4)
    ...     assert config.association.cone_size == 0.4
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        else:
            return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Topology and Geometry Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def topology():
    """Channel topology index shared by the whole session (read-only)."""
    return ChannelTopologyIndex.build()


@pytest.fixture(scope="session")
def geometry_rows(topology):
    """One nominal (ieta, iphi, depth, x, y, z) row per channel."""
    return make_fake_geometry_rows(topology)


@pytest.fixture(scope="session")
def geometry(topology, geometry_rows):
    """Channel geometry built from the nominal rows."""
    return ChannelGeometry.from_rows(topology, geometry_rows)


@pytest.fixture
def geometry_files(tmp_path, topology):
    """Barrel and endcap geometry tables written to a temp directory.

    Returns (hb_path, he_path).
    """
    return write_fake_geometry_files(topology, tmp_path)
