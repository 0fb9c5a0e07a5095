"""
run_generate.py
===============
CLI entrypoint for the procedural universe generator.

All parameters are optional; unspecified parameters fall back to the values
in ``--config`` (a ``params.json`` from an earlier run) when given, else to
the defaults defined in ``UniverseConfig`` / ``SystemConfig``.

Quick start
-----------
    python run_generate.py

With custom parameters::

    python run_generate.py \\
        --systems 12 \\
        --extra_edges 4 \\
        --star_count 1 2 \\
        --planetoids 3 6 \\
        --moons_per_planetoid 0 3 \\
        --nickname_chance 0.5 \\
        --seed 123 \\
        --out_dir output

Re-run a previous configuration with another seed::

    python run_generate.py --config output/params.json --seed 9
"""

import argparse
import json
import os
import sys
from typing import List, Optional

from universegen import (
    ConfigError,
    UniverseConfig,
    UniverseGenerator,
    config_from_dict,
    config_to_dict,
    validate_seed,
)

DEFAULT_SEED = 123

_TOP_FIELDS = ("systems", "extra_edges")
_SYSTEM_FIELDS = (
    "star_count", "planetoids", "asteroids", "moons_per_planetoid",
    "max_hazards_per_body", "nickname_chance",
    "planetoid_distance", "moon_distance", "belt_distance",
)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="run_generate.py",
        description=(
            "Deterministic procedural universe generator.\n"
            "Produces bodies.csv, links.csv, report.txt, params.json and "
            "(optionally) graph.gexf in OUT_DIR."
        ),
    )

    # ── Universe parameters ───────────────────────────────────────────────
    p.add_argument(
        "--systems", type=int, default=None,
        metavar="N",
        help="Number of star systems (default 4).",
    )
    p.add_argument(
        "--extra_edges", type=int, default=None,
        metavar="N",
        help=(
            "Extra link attempts on top of the spanning tree (default 2).  "
            "Duplicate draws are skipped, so fewer links may be added."
        ),
    )

    # ── Per-system cardinalities (inclusive LO HI) ────────────────────────
    p.add_argument(
        "--star_count", type=int, nargs=2, default=None,
        metavar=("LO", "HI"),
        help="Stars per system (default 1 3).",
    )
    p.add_argument(
        "--planetoids", type=int, nargs=2, default=None,
        metavar=("LO", "HI"),
        help="Planetoids per system (default 2 4).",
    )
    p.add_argument(
        "--asteroids", type=int, nargs=2, default=None,
        metavar=("LO", "HI"),
        help="Asteroid belts per system (default 1 3).",
    )
    p.add_argument(
        "--moons_per_planetoid", type=int, nargs=2, default=None,
        metavar=("LO", "HI"),
        help="Moons per planetoid (default 0 2).",
    )

    # ── Hazards and nicknames ─────────────────────────────────────────────
    p.add_argument(
        "--max_hazards_per_body", type=int, default=None,
        metavar="N",
        help="Maximum hazards on one body, 0-3 (default 2).",
    )
    p.add_argument(
        "--nickname_chance", type=float, default=None,
        metavar="P",
        help="Probability [0, 1] that an entity tries for a nickname (default 0.2).",
    )

    # ── Orbital distances (inclusive LO HI) ──────────────────────────────
    p.add_argument(
        "--planetoid_distance", type=int, nargs=2, default=None,
        metavar=("LO", "HI"),
        help="Planetoid orbital distance (default 40 400).",
    )
    p.add_argument(
        "--moon_distance", type=int, nargs=2, default=None,
        metavar=("LO", "HI"),
        help="Moon orbital distance (default 1 20).",
    )
    p.add_argument(
        "--belt_distance", type=int, nargs=2, default=None,
        metavar=("LO", "HI"),
        help="Asteroid belt orbital distance (default 300 900).",
    )

    # ── Reproducibility ───────────────────────────────────────────────────
    p.add_argument(
        "--seed", type=int, default=None,
        metavar="S",
        help=f"Random seed in [0, 2**64) (default {DEFAULT_SEED}).",
    )
    p.add_argument(
        "--config", type=str, default=None,
        metavar="PATH",
        help="Load parameters from a params.json; explicit flags override it.",
    )

    # ── Output ───────────────────────────────────────────────────────────
    p.add_argument(
        "--out_dir", type=str, default="output",
        metavar="DIR",
        help="Directory to write output files (created if absent).",
    )
    p.add_argument(
        "--no_gexf", action="store_true",
        help="Skip GEXF export.",
    )

    return p


def resolve_params(args: argparse.Namespace) -> dict:
    """Merge ``--config`` contents and explicit flags into one params dict."""
    params = {"seed": DEFAULT_SEED, **config_to_dict(UniverseConfig())}

    if args.config is not None:
        with open(args.config, encoding="utf-8") as f:
            saved = json.load(f)
        if not isinstance(saved, dict):
            raise ConfigError(f"{args.config}: expected a JSON object")
        saved = dict(saved)
        saved_system = saved.pop("system", None) or {}
        if not isinstance(saved_system, dict):
            raise ConfigError(f"{args.config}: 'system' must be a JSON object")
        params["system"].update(saved_system)
        params.update(saved)

    if args.seed is not None:
        params["seed"] = args.seed
    for name in _TOP_FIELDS:
        value = getattr(args, name)
        if value is not None:
            params[name] = value
    for name in _SYSTEM_FIELDS:
        value = getattr(args, name)
        if value is not None:
            params["system"][name] = value

    return params


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        params = resolve_params(args)
        seed = validate_seed(params.pop("seed"))
        cfg = config_from_dict(params)
    except (ConfigError, OSError, json.JSONDecodeError) as e:
        parser.error(str(e))

    # Print config so the user can confirm parameters before waiting
    print("Configuration")
    print("─" * 40)
    print(f"  {'seed':<22} = {seed}")
    print(f"  {'systems':<22} = {cfg.systems}")
    print(f"  {'extra_edges':<22} = {cfg.extra_edges}")
    for name in _SYSTEM_FIELDS:
        print(f"  {name:<22} = {getattr(cfg.system, name)}")
    print()

    gen = UniverseGenerator(seed, cfg)
    gen.run(out_dir=args.out_dir, gexf=not args.no_gexf)

    # Persist generation parameters so the run can be repeated with --config
    params_path = os.path.join(args.out_dir, "params.json")
    with open(params_path, "w", encoding="utf-8") as f:
        json.dump({"seed": seed, **config_to_dict(cfg)}, f, indent=2)
    print(f"Wrote {params_path}")


if __name__ == "__main__":
    main(sys.argv[1:])
