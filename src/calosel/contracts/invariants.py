"""Formal processing invariants.

This file documents what each stage MUST produce. Use it as a reviewer anchor.
"""

PROCESSING_INVARIANTS = {
    "topology": [
        "Exactly CHANNEL_COUNT (5184) channels, enumerated in a fixed order",
        "linear_index and triple_of are inverse to each other",
        "Every channel has a module and a rack inside the hardware map range",
        "Positions within module/rack follow insertion (index) order",
    ],

    "neighbors": [
        "Channel neighbors share depth and differ in module",
        "Azimuth wraps 72 <-> 1; ieta never lands on 0",
        "Neighbor lists are sorted and computed at most once",
    ],

    "geometry": [
        "Every enumerated channel has exactly one unit direction vector",
    ],

    "event": [
        "depth/ieta/iphi are integer arrays over 'pulse'",
        "charge/pedestal/gain are arrays over ('pulse', 'ts')",
        "A channel occurs at most once per event",
    ],

    "selection": [
        "'selected' is boolean, one value per occurrence",
        "'associated_jet_pt' is zero for every discarded occurrence",
        "Unassociated occurrences are never selected by the jet selector",
    ],
}
