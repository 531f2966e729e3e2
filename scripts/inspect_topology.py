#!/usr/bin/env python3
"""Channel topology inspector.

Usage:
    python scripts/inspect_topology.py scripts/user_config.py
    python scripts/inspect_topology.py scripts/user_config.py --channel 2 16 1
    python scripts/inspect_topology.py --skip-geometry

Note: User config in scripts/user_config.py, expert defaults in calosel.schemas.param
"""

from calosel.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
