"""UserConfig: Forgiving, minimal user-facing configuration.

This schema accepts user inputs with upper-case aliases for the commonly
tuned knobs (e.g., CONE_SIZE -> association.cone_size) as well as nested
section overrides for advanced users.

UserConfig is intentionally minimal - users only specify what they want
to override from the expert defaults.
"""

from typing import Literal, Optional
from pydantic import Field, field_validator
from calosel.schemas.base import CaloselBaseModel


class UserGeometryConfig(CaloselBaseModel):
    """User-facing geometry config."""
    hb_file: Optional[str] = None
    he_file: Optional[str] = None


class UserAssociationConfig(CaloselBaseModel):
    """User-facing association config."""
    cone_size: Optional[float] = None
    eta_to_phi_ratio: Optional[float] = None
    metric: Optional[str] = None

    @field_validator("metric", mode="before")
    @classmethod
    def normalize_metric(cls, v):
        """Normalize metric names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserPruningConfig(CaloselBaseModel):
    """User-facing pruning config."""
    et_fraction_cutoff: Optional[float] = None
    jet_pt_cutoff: Optional[float] = None
    budget_total: Optional[str] = None

    @field_validator("budget_total", mode="before")
    @classmethod
    def normalize_budget_total(cls, v):
        if isinstance(v, str):
            return v.lower().strip()
        return v


class UserExtractorConfig(CaloselBaseModel):
    """User-facing extractor config."""
    min_response_ts: Optional[int] = None
    max_response_ts: Optional[int] = None
    n_time_slices: Optional[int] = None


class UserConfig(CaloselBaseModel):
    """User-facing configuration schema.

    Usage
    -----
        user_cfg = UserConfig(
            CONE_SIZE=0.4,
            JET_PT_CUTOFF=30,
            HB_GEOMETRY_FILE="/data/geometry/hb.ctr",
        )

        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    # Geometry files (flat aliases)
    hb_geometry_file: Optional[str] = Field(None, alias="HB_GEOMETRY_FILE")
    he_geometry_file: Optional[str] = Field(None, alias="HE_GEOMETRY_FILE")
    hardware_map: Optional[str] = Field(None, alias="HARDWARE_MAP")

    # Selection settings (flat aliases)
    channel_selector: Optional[str] = Field(None, alias="CHANNEL_SELECTOR")
    cone_size: Optional[float] = Field(None, alias="CONE_SIZE")
    eta_to_phi_ratio: Optional[float] = Field(None, alias="ETA_TO_PHI_RATIO")
    cone_metric: Optional[str] = Field(None, alias="CONE_METRIC")
    jet_pt_cutoff: Optional[float] = Field(None, alias="JET_PT_CUTOFF")
    et_fraction_cutoff: Optional[float] = Field(None, alias="ET_FRACTION_CUTOFF")
    budget_total: Optional[str] = Field(None, alias="BUDGET_TOTAL")

    # Energy window (flat aliases)
    min_response_ts: Optional[int] = Field(None, alias="MIN_RESPONSE_TS")
    max_response_ts: Optional[int] = Field(None, alias="MAX_RESPONSE_TS")

    # Output and logging
    store_selected_only: Optional[bool] = Field(None, alias="STORE_SELECTED_ONLY")
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = Field(
        None, alias="LOG_LEVEL"
    )

    # Nested overrides (advanced users)
    geometry: Optional[UserGeometryConfig] = None
    association: Optional[UserAssociationConfig] = None
    pruning: Optional[UserPruningConfig] = None
    extractor: Optional[UserExtractorConfig] = None

    model_config = CaloselBaseModel.model_config.copy()
    # Allow forgiving input dictionaries (ignore unknown legacy keys)
    model_config.update({"populate_by_name": True, "extra": "ignore"})

    @field_validator("cone_size", "eta_to_phi_ratio", "jet_pt_cutoff", "et_fraction_cutoff",
                     mode="before")
    @classmethod
    def coerce_numeric_fields(cls, v):
        """Accept int or float for numeric fields."""
        if v is not None:
            return float(v)
        return v

    @field_validator("channel_selector", "cone_metric", "budget_total", mode="before")
    @classmethod
    def normalize_names(cls, v):
        """Normalize strategy names to lowercase."""
        if isinstance(v, str):
            return v.lower().strip()
        return v

    def to_internal_overrides(self) -> dict:
        """Convert flat UserConfig to nested InternalConfig structure.

        Nested sections win over flat aliases.

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
        if self.geometry is not None:
            geometry.update(self.geometry.model_dump(exclude_none=True))
        if geometry:
            overrides["geometry"] = geometry

        if self.hardware_map is not None:
            overrides["topology"] = {"hardware_map": self.hardware_map}

        if self.channel_selector is not None:
            overrides["selector"] = {"method": self.channel_selector}

        association = {}
        if self.cone_size is not None:
            association["cone_size"] = self.cone_size
        if self.eta_to_phi_ratio is not None:
            association["eta_to_phi_ratio"] = self.eta_to_phi_ratio
        if self.cone_metric is not None:
            association["metric"] = self.cone_metric
        if self.association is not None:
            association.update(self.association.model_dump(exclude_none=True))
        if association:
            overrides["association"] = association

        pruning = {}
        if self.jet_pt_cutoff is not None:
            pruning["jet_pt_cutoff"] = self.jet_pt_cutoff
        if self.et_fraction_cutoff is not None:
            pruning["et_fraction_cutoff"] = self.et_fraction_cutoff
        if self.budget_total is not None:
            pruning["budget_total"] = self.budget_total
        if self.pruning is not None:
            pruning.update(self.pruning.model_dump(exclude_none=True))
        if pruning:
            overrides["pruning"] = pruning

        extractor = {}
        if self.min_response_ts is not None:
            extractor["min_response_ts"] = self.min_response_ts
        if self.max_response_ts is not None:
            extractor["max_response_ts"] = self.max_response_ts
        if self.extractor is not None:
            extractor.update(self.extractor.model_dump(exclude_none=True))
        if extractor:
            overrides["extractor"] = extractor

        if self.store_selected_only is not None:
            overrides["output"] = {"store_selected_only": self.store_selected_only}

        if self.log_level is not None:
            overrides["logging"] = {"level": self.log_level}

        return overrides
