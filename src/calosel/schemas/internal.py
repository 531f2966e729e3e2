"""InternalConfig: Authoritative runtime configuration.

This is the ONLY config schema that runtime code sees. It is fully validated,
normalized, and immutable.
"""

from typing import Literal
from pydantic import Field, ConfigDict
from calosel.schemas.base import CaloselBaseModel


# =============================================================================
# Nested Configuration Models (Runtime)
# =============================================================================

class InternalGeometryConfig(CaloselBaseModel):
    """Runtime geometry file configuration."""
    hb_file: str
    he_file: str


class InternalTopologyConfig(CaloselBaseModel):
    """Runtime hardware map selection."""
    hardware_map: str


class InternalSelectorConfig(CaloselBaseModel):
    """Runtime selector configuration."""
    method: str


class InternalAssociationConfig(CaloselBaseModel):
    """Runtime cone association configuration."""
    cone_size: float = Field(gt=0)
    eta_to_phi_ratio: float = Field(gt=0)
    metric: Literal["elliptic", "euclidean"]


class InternalPruningConfig(CaloselBaseModel):
    """Runtime pruning configuration."""
    et_fraction_cutoff: float = Field(ge=0, lt=1.0)
    jet_pt_cutoff: float = Field(ge=0)
    budget_total: Literal["jet", "channels"]


class InternalExtractorConfig(CaloselBaseModel):
    """Runtime energy extraction window."""
    min_response_ts: int
    max_response_ts: int
    n_time_slices: int


class InternalOutputConfig(CaloselBaseModel):
    """Runtime output configuration."""
    store_selected_only: bool


class InternalLoggingConfig(CaloselBaseModel):
    """Runtime logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class InternalProcessorConfig(CaloselBaseModel):
    """Runtime processor configuration."""
    warm_neighbor_cache: bool = True  # Fill neighbor tables before the first event


# =============================================================================
# Main InternalConfig
# =============================================================================

class InternalConfig(CaloselBaseModel):
    """Authoritative runtime configuration.

    Runtime modules receive InternalConfig and access fields directly:

        def __init__(self, config: InternalConfig):
            self.cone_size = config.association.cone_size  # NOT .get()

    Rules
    -----
    - NO .get() calls
    - NO fallback defaults
    - NO validation in runtime code
    """

    geometry: InternalGeometryConfig
    topology: InternalTopologyConfig
    selector: InternalSelectorConfig
    association: InternalAssociationConfig
    pruning: InternalPruningConfig
    extractor: InternalExtractorConfig
    output: InternalOutputConfig
    logging: InternalLoggingConfig
    processor: InternalProcessorConfig = Field(default_factory=InternalProcessorConfig)

    model_config = ConfigDict(
        extra='forbid',
        validate_assignment=True,
        use_enum_values=True,
        str_strip_whitespace=True,
        frozen=True,  # Immutable after construction
    )
