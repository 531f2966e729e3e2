"""Topology inspection entry point.

Resolves configuration, builds the channel topology index, optionally loads
the channel geometry, and prints a summary. Scripts are thin wrappers; this
is the real implementation.
"""

import json
import logging
import argparse
import importlib.util
from pathlib import Path
from typing import Optional, Dict, Any, Sequence

from calosel.calo import ChannelGeometry, ChannelTopologyIndex
from calosel.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig


logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing CONFIG dict.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def setup_logging(level: str = "INFO", log_path: Optional[str] = None) -> None:
    """Install console (and optional file) handlers on the root logger."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if log_path is not None:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    logger.debug("Logging: level=%s, file=%s", level, log_path)


def describe_channel(index: ChannelTopologyIndex, depth: int, ieta: int, iphi: int) -> Dict[str, Any]:
    """Index, hardware grouping and cross-module neighbors of one channel."""
    i = index.linear_index(depth, ieta, iphi)
    cid = index.triple_of(i)
    return {
        "channel": str(cid),
        "subdetector": cid.subdetector.value,
        "index": i,
        "module": index.module_of(i),
        "rack": index.rack_of(i),
        "position_in_module": index.position_within_module(i),
        "position_in_rack": index.position_within_rack(i),
        "neighbors": [str(index.triple_of(n)) for n in index.channel_neighbors(i)],
    }


def inspect_topology(
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    channel: Optional[Sequence[int]] = None,
    load_geometry: bool = True,
    verbose: bool = False,
) -> Dict[str, Any]:
    """Build the topology (and geometry) and return a summary dict.

    Parameters
    ----------
    user_config_path : str, optional
        Path to user config file (Python file with CONFIG dict).
    cli_args : dict, optional
        CLI overrides. Keys: hb_geometry_file, he_geometry_file, hardware_map,
        channel_selector, store_selected_only, log_level.
    channel : (depth, ieta, iphi), optional
        Channel to describe in detail.
    load_geometry : bool
        Read the geometry tables named by the configuration.
    verbose : bool
        Enable DEBUG logging.

    Raises
    ------
    FileNotFoundError
        If the config or a geometry file does not exist.
    InvalidChannel
        If ``channel`` is not part of the enumeration.
    """
    param_cfg = ParamConfig()

    user_cfg_dict = load_user_config_dict(user_config_path) if user_config_path else {}
    user_cfg = UserConfig.model_validate(user_cfg_dict)

    cli_args = dict(cli_args or {})
    if verbose and cli_args.get("log_level") is None:
        cli_args["log_level"] = "DEBUG"
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(param_cfg, user_cfg, cli_cfg)
    setup_logging(config.logging.level)

    index = ChannelTopologyIndex.from_config(config)
    index.ensure_neighbors_computed()

    summary: Dict[str, Any] = {
        "channels": len(index),
        "modules": index.n_modules,
        "racks": index.n_racks,
        "max_channels_per_module": index.max_channels_per_module(),
        "max_channels_per_rack": index.max_channels_per_rack(),
        "hardware_map": config.topology.hardware_map,
        "selector": config.selector.method,
        "geometry": None,
    }

    if load_geometry:
        paths = [config.geometry.hb_file, config.geometry.he_file]
        geometry = ChannelGeometry.from_files(index, paths)
        summary["geometry"] = {"files": paths, "channels": len(geometry)}

    if channel is not None:
        summary["channel"] = describe_channel(index, *channel)

    if verbose:
        summary["config"] = config.model_dump()

    return summary


def print_summary(summary: Dict[str, Any]) -> None:
    print(f"\n{'='*60}")
    print("calosel channel topology")
    print('='*60)
    print(f"Channels: {summary['channels']}")
    print(f"Modules:  {summary['modules']} (max {summary['max_channels_per_module']} channels)")
    print(f"Racks:    {summary['racks']} (max {summary['max_channels_per_rack']} channels)")
    print(f"Hardware: {summary['hardware_map']}")
    print(f"Selector: {summary['selector']}")
    if summary["geometry"] is not None:
        print(f"Geometry: {', '.join(summary['geometry']['files'])}")
    print('='*60)

    if "channel" in summary:
        print(json.dumps(summary["channel"], indent=2))

    if "config" in summary:
        print("\nFull Internal Configuration:")
        print(json.dumps(summary["config"], indent=2))
        print('='*60)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect the calorimeter channel topology")
    parser.add_argument("config", nargs="?", help="Path to user config file")
    parser.add_argument("--hb-geometry", help="Override barrel geometry table")
    parser.add_argument("--he-geometry", help="Override endcap geometry table")
    parser.add_argument("--hardware-map", metavar="MODULE:NAME",
                        help="Hardware map import path (module:attribute)")
    parser.add_argument("--channel-selector", help="Channel selection strategy (jet or all)")
    parser.add_argument("--store-selected-only", action="store_const", const=True,
                        help="Keep only selected channels in processed events")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        type=str.upper, help="Logging level")
    parser.add_argument("--channel", nargs=3, type=int, metavar=("DEPTH", "IETA", "IPHI"),
                        help="Describe a single channel")
    parser.add_argument("--skip-geometry", action="store_true", help="Do not read geometry tables")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    summary = inspect_topology(
        args.config,
        cli_args={
            "hb_geometry_file": args.hb_geometry,
            "he_geometry_file": args.he_geometry,
            "hardware_map": args.hardware_map,
            "channel_selector": args.channel_selector,
            "store_selected_only": args.store_selected_only,
            "log_level": args.log_level,
        },
        channel=args.channel,
        load_geometry=not args.skip_geometry,
        verbose=args.verbose,
    )
    print_summary(summary)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
