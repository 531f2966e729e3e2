"""`calosel` - calorimeter channel topology and energy-budgeted channel selection.

Subpackages:
- calo: Channel enumeration, hardware grouping, neighbors, geometry
- selection: Energy extraction, jet association, budget pruning
- pipeline: Per-event processor
- schemas: Layered configuration
- contracts: Stage invariants and failure types
"""

__version__ = "0.1.0"
