"""CLIConfig: Command-line operational overrides.

Minimal configuration for parameters that commonly change between runs:
geometry file locations, hardware map, selection strategy, verbosity.
"""

from typing import Literal, Optional
from calosel.schemas.base import CaloselBaseModel


class CLIConfig(CaloselBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(
            hb_geometry_file="/data/geometry/hb.ctr",
            channel_selector="all",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    hb_geometry_file: Optional[str] = None
    he_geometry_file: Optional[str] = None
    hardware_map: Optional[str] = None
    channel_selector: Optional[str] = None
    store_selected_only: Optional[bool] = None
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        geometry = {}
        if self.hb_geometry_file is not None:
            geometry["hb_file"] = self.hb_geometry_file
        if self.he_geometry_file is not None:
            geometry["he_file"] = self.he_geometry_file
        if geometry:
            overrides["geometry"] = geometry

        if self.hardware_map is not None:
            overrides["topology"] = {"hardware_map": self.hardware_map}

        if self.channel_selector is not None:
            overrides["selector"] = {"method": self.channel_selector}

        if self.store_selected_only is not None:
            overrides["output"] = {"store_selected_only": self.store_selected_only}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
