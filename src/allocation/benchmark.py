"""
src/allocation/benchmark.py
──────────────────────────────────────────────────────────────────────────────
Benchmark: the allocation engine on random scenarios.

Each scenario draws item weights, pairwise exclusions and carrier capacities
from a seeded numpy generator, allocates, and checks the result.

Metrics per scenario:
  • Assignment rate        (assigned weight / total weight)
  • Load imbalance         (max − min carrier load)
  • Splits                 (evicted items halved during resolution)
  • Solve time             (wall-clock, ms)
  • Invariant violations   (capacity, compatibility, weight conservation)

Usage:
    python -m src.allocation.benchmark                       # 50 scenarios
    python -m src.allocation.benchmark --scenarios 200 --items 40 --carriers 5
    python -m src.allocation.benchmark --conflict-prob 0.2 --slack 0.9
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass

import numpy as np

from src.allocation.carriers import carriers_from_capacities
from src.allocation.config import AllocatorConfig
from src.allocation.engine import AllocationEngine
from src.allocation.items import Item
from src.allocation.metrics import check_invariants, compute_load_metrics
from src.fleet.logger import configure_logging


@dataclass
class BenchmarkScenario:
    """A single random allocation scenario."""

    items: list[Item]
    capacities: dict[str, int]

    @property
    def total_weight(self) -> int:
        return sum(item.weight for item in self.items)


def generate_scenario(
    rng: np.random.Generator,
    n_items: int,
    n_carriers: int,
    weight_range: tuple[int, int] = (1, 30),
    conflict_prob: float = 0.05,
    slack: float = 1.2,
) -> BenchmarkScenario:
    """Draw a random scenario.

    Args:
        rng: Seeded generator; the same seed yields the same scenario.
        n_items: Number of items (ids ``G000``, ``G001``, ...).
        n_carriers: Number of carriers (ids ``Vehicle-0``, ...).
        weight_range: Inclusive bounds for item weights.
        conflict_prob: Probability that item i excludes item j (i < j).
        slack: Total capacity as a multiple of total item weight, split
            evenly across carriers.
    """
    lo, hi = weight_range
    weights = rng.integers(lo, hi + 1, size=n_items)
    ids = [f"G{i:03d}" for i in range(n_items)]

    exclusions: list[set[str]] = [set() for _ in range(n_items)]
    if n_items > 1 and conflict_prob > 0:
        mask = rng.random((n_items, n_items)) < conflict_prob
        for i, j in zip(*np.nonzero(np.triu(mask, k=1))):
            exclusions[int(i)].add(ids[int(j)])

    items = [Item(ids[i], int(weights[i]), exclusions[i]) for i in range(n_items)]
    per_carrier = int(np.ceil(weights.sum() * slack / max(n_carriers, 1)))
    capacities = {f"Vehicle-{k}": per_carrier for k in range(n_carriers)}
    return BenchmarkScenario(items=items, capacities=capacities)


def run_benchmark(
    n_scenarios: int = 50,
    n_items: int = 30,
    n_carriers: int = 3,
    conflict_prob: float = 0.05,
    slack: float = 1.2,
    seed: int = 42,
    config: AllocatorConfig | None = None,
) -> dict[str, list[float]]:
    """Run scenarios, print a summary table and return the raw per-scenario samples."""

    print("=" * 72)
    print("  Cargo Allocation Benchmark")
    print("=" * 72)
    print(
        f"  Scenarios: {n_scenarios}  |  Items: {n_items}  |  Carriers: {n_carriers}  |  "
        f"Conflict p: {conflict_prob}  |  Slack: {slack}  |  Seed: {seed}"
    )
    print()

    engine = AllocationEngine(config)
    rng = np.random.default_rng(seed)
    samples: dict[str, list[float]] = {"rate": [], "imbal": [], "splits": [], "time_ms": [], "violations": []}

    for _ in range(n_scenarios):
        scenario = generate_scenario(rng, n_items, n_carriers, conflict_prob=conflict_prob, slack=slack)
        result = engine.allocate_with_diagnostics(scenario.items, scenario.capacities)
        carriers = carriers_from_capacities(scenario.capacities)
        metrics = compute_load_metrics(result.assignment, carriers, result.unassigned)

        violations = len(check_invariants(result.assignment, carriers))
        if metrics.assigned_weight + metrics.unassigned_weight != scenario.total_weight:
            violations += 1

        samples["rate"].append(metrics.assignment_rate * 100.0)
        samples["imbal"].append(metrics.load_imbalance)
        samples["splits"].append(result.n_splits)
        samples["time_ms"].append(result.solve_time_ms)
        samples["violations"].append(violations)

    rows = [
        ("Assignment rate (%)", "rate", ".1f"),
        ("Load imbalance (max-min)", "imbal", ".1f"),
        ("Splits per scenario", "splits", ".2f"),
        ("Solve time (ms)", "time_ms", ".3f"),
    ]
    print(f"  {'Metric':<28}{'mean':>12}{'p95':>12}{'max':>12}")
    print("  " + "─" * 64)
    for label, key, fmt in rows:
        arr = np.asarray(samples[key], dtype=np.float64)
        print(
            f"  {label:<28}{np.mean(arr):>12{fmt}}{np.percentile(arr, 95):>12{fmt}}{np.max(arr):>12{fmt}}"
        )
    print()
    print(f"  Invariant violations: {int(sum(samples['violations']))}")
    print("=" * 72)
    return samples


def main() -> None:
    """CLI entry point."""

    parser = argparse.ArgumentParser(description="Benchmark the cargo allocation engine")
    parser.add_argument("--scenarios", type=int, default=50)
    parser.add_argument("--items", type=int, default=30)
    parser.add_argument("--carriers", type=int, default=3)
    parser.add_argument("--conflict-prob", type=float, default=0.05)
    parser.add_argument("--slack", type=float, default=1.2)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--max-attempts", type=int, default=3)
    parser.add_argument(
        "--log-level",
        type=str,
        default="CRITICAL",
        help="Engine log level (per-item warnings are silenced by default)",
    )
    args = parser.parse_args()

    configure_logging(args.log_level)

    run_benchmark(
        n_scenarios=args.scenarios,
        n_items=args.items,
        n_carriers=args.carriers,
        conflict_prob=args.conflict_prob,
        slack=args.slack,
        seed=args.seed,
        config=AllocatorConfig(max_attempts=args.max_attempts),
    )


if __name__ == "__main__":
    main()
