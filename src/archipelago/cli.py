"""Command-line interface for archipelago generation."""

import argparse
import logging
import sys
from pathlib import Path

import structlog

from .types import Pattern

logger = structlog.get_logger()


def _parse_seed(value: str) -> int | str:
    """Integer-looking seeds are used as integers, anything else as text."""
    try:
        return int(value)
    except ValueError:
        return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="archipelago-gen",
        description="Generate a procedural multi-island archipelago",
    )
    parser.add_argument("--seed", type=_parse_seed, default=None, help="Seed (int or text)")
    parser.add_argument(
        "--pattern",
        choices=[pattern.value for pattern in Pattern],
        default=None,
        help="Island distribution pattern",
    )
    parser.add_argument("--width", type=int, default=None, help="Grid width in cells")
    parser.add_argument("--height", type=int, default=None, help="Grid height in cells")
    parser.add_argument("--islands", type=int, default=None, help="Number of islands")
    parser.add_argument(
        "--config", type=Path, default=None, help="TOML config file (optional)"
    )
    parser.add_argument(
        "--massive", action="store_true", help="Use chunked massive generation"
    )
    parser.add_argument(
        "--budget", type=int, default=None, help="Block budget (massive only)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return parser


def configure_logging(verbose: bool) -> None:
    """Configure structlog for CLI output."""
    level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


def _overrides(args: argparse.Namespace, massive: bool) -> dict:
    update = {}
    if args.seed is not None:
        update["seed"] = args.seed
    if args.width is not None:
        update["width"] = args.width
    if args.height is not None:
        update["height"] = args.height
    if massive:
        if args.islands is not None:
            update["island_count_min"] = args.islands
            update["island_count_max"] = args.islands
        if args.budget is not None:
            update["block_budget"] = args.budget
    else:
        if args.islands is not None:
            update["island_count"] = args.islands
        if args.pattern is not None:
            update["pattern"] = Pattern(args.pattern)
    return update


def run(args: argparse.Namespace) -> int:
    """Generate from parsed arguments and print a summary; returns an exit code."""
    from .config import (
        ArchipelagoConfig,
        MassiveArchipelagoConfig,
        load_config,
        load_massive_config,
    )
    from .exceptions import ArchipelagoError
    from .generator import generate_archipelago
    from .massive import MassiveArchipelagoGenerator

    try:
        if args.massive:
            config = load_massive_config(args.config) if args.config else MassiveArchipelagoConfig()
            config = config.model_copy(update=_overrides(args, massive=True))
            result = MassiveArchipelagoGenerator(config).generate()
            stats = result.stats
            print(f"Islands: {stats.island_count}")
            print(
                f"Chunks: {stats.generated_chunks}/{stats.total_chunks} "
                f"({stats.deferred_chunks} deferred)"
            )
            print(f"Blocks: {stats.blocks_kept} kept of {stats.blocks_generated} generated")
            print(f"Budget reached: {stats.budget_reached}")
            print(f"Time: {stats.generation_time_ms:.1f} ms")
        else:
            config = load_config(args.config) if args.config else ArchipelagoConfig()
            config = config.model_copy(update=_overrides(args, massive=False))
            result = generate_archipelago(config)
            stats = result.stats
            print(f"Islands: {len(result.islands)}")
            for island in result.islands:
                print(
                    f"  {island.island_id}: {island.island_type.value}, "
                    f"radius {island.base_radius}, "
                    f"{stats.island_sizes[island.island_id]} blocks"
                )
            print(f"Blocks: {stats.total_blocks}")
            print(f"Coverage: {stats.coverage_area:.2%}")
            print(f"Relaxation converged: {stats.relaxation_converged}")
            print(f"Time: {stats.generation_time_ms:.1f} ms")
    except ArchipelagoError as e:
        logger.error("generation_failed", error=str(e))
        return 1

    return 0


def main() -> None:
    """CLI entry point for archipelago generation."""
    args = build_parser().parse_args()
    configure_logging(args.verbose)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
