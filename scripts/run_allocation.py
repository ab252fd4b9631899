"""
run_allocation.py
──────────────────────────────────────────────────────────────────────────────
Allocate an item batch over a fleet of carriers and report the result.

Usage:
    python -m scripts.run_allocation --items config/sample_goods.json
    python -m scripts.run_allocation --items goods.json --config config/default_fleet.yaml
    python -m scripts.run_allocation --items goods.json --capacity Vehicle-3=60
    python -m scripts.run_allocation --items goods.json --output distribution_results.json

Exit status is 0 whether or not every item was placed; unplaced items are
listed in the report and in the output file.
"""

import argparse
from pathlib import Path

from src.allocation.config import AllocatorConfig
from src.allocation.engine import AllocationEngine
from src.allocation.errors import AllocationError
from src.allocation.metrics import compute_load_metrics
from src.fleet.config import DEFAULT_CONFIG_PATH, FleetConfig, load_config, parse_capacity
from src.fleet.logger import configure_logging
from src.fleet.records import load_items, save_result


def main(argv=None):
    """Main"""

    parser = argparse.ArgumentParser(description="Allocate items to carriers")
    parser.add_argument("--items", type=str, required=True, help="Path to item batch JSON")
    parser.add_argument(
        "--config",
        type=str,
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to fleet config YAML",
    )
    parser.add_argument(
        "--capacity",
        type=str,
        action="append",
        default=[],
        metavar="CARRIER=CAPACITY",
        help="Add or override a carrier capacity (repeatable)",
    )
    parser.add_argument("--max-attempts", type=int, default=None, help="Override reassignment attempts")
    parser.add_argument("--output", type=str, default=None, help="Write the result JSON here")
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument("--log-file", type=str, default=None)
    args = parser.parse_args(argv)

    configure_logging(args.log_level, args.log_file)

    try:
        # Load config
        config_path = Path(args.config)
        if config_path.exists():
            config = load_config(config_path)
            print(f"Loaded config from {config_path}")
        else:
            print(f"Config {config_path} not found, using the default three-vehicle fleet")
            config = FleetConfig.default()

        # Apply CLI overrides
        if args.capacity:
            config = config.with_capacities(dict(parse_capacity(s) for s in args.capacity))
        if args.max_attempts is not None:
            config = FleetConfig(
                carriers=config.carriers,
                allocator=AllocatorConfig(
                    max_attempts=args.max_attempts,
                    split_incompatible=config.allocator.split_incompatible,
                ),
            )

        items = load_items(args.items)
        carriers = config.build_carriers()
    except AllocationError as exc:
        parser.error(str(exc))

    # Run
    engine = AllocationEngine(config.allocator)
    result = engine.allocate_with_diagnostics(items, config.carriers)
    metrics = compute_load_metrics(result.assignment, carriers, result.unassigned)

    # Per-carrier summary
    print(f"\n{'=' * 60}")
    print(f"Allocation Summary ({result.status.name}, {result.solve_time_ms:.2f} ms):")
    print(f"{'=' * 60}")
    print(f"{'Carrier':<14} {'Items':>6} {'Load':>7} {'Cap':>7} {'Util%':>7}")
    print(f"{'-' * 14} {'-' * 6} {'-' * 7} {'-' * 7} {'-' * 7}")
    for carrier in carriers:
        print(
            f"{carrier.id:<14} {len(result.assignment[carrier.id]):>6} "
            f"{metrics.carrier_loads[carrier.id]:>7} {carrier.capacity:>7} "
            f"{metrics.carrier_utilization_pct[carrier.id]:>6.1f}%"
        )
    print(f"\nTarget load per carrier: {metrics.target_load:.1f}")
    print(f"Load imbalance (max-min): {metrics.load_imbalance}")
    print(f"Splits: {result.n_splits}")

    if result.unassigned:
        print(f"\nUnassigned ({metrics.unassigned_weight} weight):")
        for item in result.unassigned:
            reason = result.rejections.get(item.id)
            print(f"  {item.id:<20} w={item.weight:<5} {reason.name if reason else ''}")

    if args.output:
        path = save_result(result, args.output)
        print(f"\nResults saved to {path}")


if __name__ == "__main__":
    main()
