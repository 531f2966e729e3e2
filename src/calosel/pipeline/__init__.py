"""Pipeline modules.

- processor: per-event channel selection
"""

from calosel.pipeline.processor import ChannelSelectionProcessor, SUMMARY_COLUMNS

__all__ = [
    "ChannelSelectionProcessor",
    "SUMMARY_COLUMNS",
]
