"""calosel User Configuration.

This is the user-facing configuration file. Modify settings here to customize
channel selection. Advanced settings live in calosel.schemas.param.

Usage:
    python scripts/inspect_topology.py scripts/user_config.py
    python scripts/inspect_topology.py scripts/user_config.py --channel 1 16 72
    calosel-topology scripts/user_config.py --skip-geometry
"""

CONFIG = {
    # ========================================================================
    # GEOMETRY TABLES
    # ========================================================================
    "HB_GEOMETRY_FILE": "Geometry/hb.ctr",   # rows: ieta iphi depth x y z
    "HE_GEOMETRY_FILE": "Geometry/he.ctr",
    "HARDWARE_MAP": "calosel.calo.hardware_map:HpdRbxMap",   # module:attribute

    # ========================================================================
    # SELECTION
    # ========================================================================
    "CHANNEL_SELECTOR": "jet",   # "jet" or "all" (or FFTJetChannelSelector / AllChannelSelector)
    "CONE_SIZE": 0.5,
    "ETA_TO_PHI_RATIO": 1.0,     # >1 stretches the cone along eta
    "CONE_METRIC": "elliptic",   # "elliptic" or "euclidean"
    "JET_PT_CUTOFF": 20.0,       # GeV
    "ET_FRACTION_CUTOFF": 0.02,  # Fraction of jet Et that may be discarded
    "BUDGET_TOTAL": "jet",       # "jet" (clustered jet Et) or "channels" (summed cone Et)

    # ========================================================================
    # ENERGY WINDOW
    # ========================================================================
    "MIN_RESPONSE_TS": 3,        # First time slice (inclusive)
    "MAX_RESPONSE_TS": 8,        # Last time slice (exclusive)

    "LOG_LEVEL": "INFO",
}
