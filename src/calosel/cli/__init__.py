"""Command-line interface modules for calosel.

This package contains the execution logic, making scripts/ optional and deletable.
"""

from calosel.cli.inspect_topology import (
    inspect_topology,
    load_user_config_dict,
    setup_logging,
    main,
)

__all__ = ['inspect_topology', 'load_user_config_dict', 'setup_logging', 'main']
