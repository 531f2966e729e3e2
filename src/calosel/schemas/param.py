"""ParamConfig: Expert defaults for channel selection.

This module defines the complete default configuration. ALL tunable
parameters must have defaults here; runtime code never defines fallback
values.

Runtime code NEVER reads from ParamConfig directly - it only receives InternalConfig.
"""

from typing import Literal
from pydantic import Field, field_validator
from calosel.schemas.base import CaloselBaseModel


# =============================================================================
# Nested Configuration Models
# =============================================================================

class GeometryConfig(CaloselBaseModel):
    """Geometry description files (ieta, iphi, depth, x, y, z rows)."""
    hb_file: str = "Geometry/hb.ctr"
    he_file: str = "Geometry/he.ctr"


class TopologyConfig(CaloselBaseModel):
    """Hardware map used to group channels into modules and racks."""
    hardware_map: str = Field(
        "calosel.calo.hardware_map:HpdRbxMap",
        description="Import path 'module:attribute' of the hardware map",
    )


class SelectorConfig(CaloselBaseModel):
    """Channel selection strategy.

    The name is checked when the selector is created, so that unknown
    strategies surface as ``UnsupportedConfiguration``.
    """
    method: str = "jet"

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method_name(cls, v):
        """Normalize method names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class AssociationConfig(CaloselBaseModel):
    """Channel to jet cone association."""
    cone_size: float = Field(0.5, gt=0, description="Geometric mean of eta-phi cone axes")
    eta_to_phi_ratio: float = Field(1.0, gt=0, description="Eta/phi cone axis ratio")
    metric: Literal["elliptic", "euclidean"] = "elliptic"


class PruningConfig(CaloselBaseModel):
    """Per-jet energy budget pruning."""
    et_fraction_cutoff: float = Field(0.02, ge=0, lt=1.0,
                                      description="Fraction of jet Et left out by dropped channels")
    jet_pt_cutoff: float = Field(20.0, ge=0, description="Minimum pt of good jets")
    budget_total: Literal["jet", "channels"] = Field(
        "jet", description="Jet total for the budget: clustered jet Et or summed channel Et")

    @field_validator("et_fraction_cutoff", "jet_pt_cutoff", mode="before")
    @classmethod
    def coerce_to_float(cls, v):
        """Allow int or float."""
        return float(v)


class ExtractorConfig(CaloselBaseModel):
    """Time slice window for signal charge. Min included, max excluded."""
    min_response_ts: int = Field(3, ge=0)
    max_response_ts: int = Field(8, ge=1)
    n_time_slices: int = Field(10, ge=1)


class OutputConfig(CaloselBaseModel):
    """Output configuration."""
    store_selected_only: bool = False


class LoggingConfig(CaloselBaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


# =============================================================================
# Main ParamConfig
# =============================================================================

class ParamConfig(CaloselBaseModel):
    """Complete expert configuration with all defaults.

    This is the single source of truth for all selection parameters.

    Usage
    -----
    This config is NOT used directly by runtime code. It serves as the
    base layer in config resolution:

        internal_cfg = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    topology: TopologyConfig = Field(default_factory=TopologyConfig)
    selector: SelectorConfig = Field(default_factory=SelectorConfig)
    association: AssociationConfig = Field(default_factory=AssociationConfig)
    pruning: PruningConfig = Field(default_factory=PruningConfig)
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
