"""Command line interface and example configurations."""

import argparse
import csv
import json
import logging
import random
import sys
from dataclasses import asdict, replace
from typing import Any, Dict, List, Optional, Tuple

from round_robin.models import (
    Competitor,
    ConfigurationError,
    Schedule,
    SchedulerConfig,
    SchedulingExhausted,
    TournamentConfig,
)
from round_robin.scheduling import ScheduleBuilder, ScheduleCalculator
from round_robin.validation import ScheduleValidator

logger = logging.getLogger(__name__)


def run_all_tests() -> bool:
    """Discover and run the unit tests"""
    import os
    import unittest

    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    loader = unittest.TestLoader()
    suite = loader.discover(os.path.join(project_root, "tests"), top_level_dir=project_root)
    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)
    return result.wasSuccessful()


def create_example_tournament() -> Tuple[TournamentConfig, SchedulerConfig]:
    """Six players, seven games each: one full round plus a partial round of 6"""
    tournament = TournamentConfig(
        name="Club Night",
        players=[f"Player {i}" for i in range(1, 7)],
        games_each=7,
        seed=42,
    )
    return tournament, SchedulerConfig()


def load_config(path: str) -> Tuple[TournamentConfig, SchedulerConfig]:
    """Load tournament and scheduler settings from a JSON file"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    tournament = TournamentConfig(**data["tournament"])
    scheduler = SchedulerConfig(**data.get("scheduler", {}))
    return tournament, scheduler


def save_config(path: str, tournament: TournamentConfig, scheduler: SchedulerConfig):
    config_data = {"tournament": asdict(tournament), "scheduler": asdict(scheduler)}
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config_data, f, indent=2, ensure_ascii=False)


def schedule_to_dict(schedule: Schedule) -> Dict[str, Any]:
    return {
        "games_per_full_round": schedule.games_per_full_round,
        "num_rounds": schedule.num_rounds(),
        "games": [
            {
                "index": index,
                "round": schedule.round_of(index) + 1,
                "player_a": game.name_a,
                "player_b": game.name_b,
                "played": game.played,
            }
            for index, game in enumerate(schedule.games)
        ],
    }


def export_csv(schedule: Schedule, path: str):
    """Write one row per game: position, round and both players"""
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["game", "round", "player_a", "player_b", "played"])
        for index, game in enumerate(schedule.games):
            writer.writerow(
                [index + 1, schedule.round_of(index) + 1, game.name_a, game.name_b, game.played]
            )


def format_schedule(schedule: Schedule) -> str:
    """Render games one per line under 'Round N:' headers"""
    lines = []
    for round_index in range(schedule.num_rounds()):
        if round_index:
            lines.append("")
        lines.append(f"Round {round_index + 1}:")
        for game in schedule.games_in_round(round_index):
            lines.append(str(game))
    return "\n".join(lines)


def print_schedule_summary(schedule: Schedule, tournament: TournamentConfig):
    """Print a formatted summary followed by the games round by round"""
    full_rounds, partial = ScheduleCalculator.round_plan(
        len(tournament.players), tournament.games_each
    )
    print(f"\n🏸 Tournament Schedule: {tournament.name}")
    print("=" * 60)
    print(f"📊 Summary:")
    print(f"   • Players: {len(tournament.players)}")
    print(f"   • Games each: {tournament.games_each}")
    print(f"   • Total games: {len(schedule)}")
    print(f"   • Full rounds: {full_rounds} of {schedule.games_per_full_round} games")
    print(f"   • Partial round: {partial} games")
    print("-" * 60)
    print(format_schedule(schedule))


def show_games_suggestions(num_players: int, games_each: Optional[int] = None):
    """Show feasible games-each values for a given number of players"""
    if games_each is None:
        games_each = num_players - 1
    print(f"\n💡 Games-each suggestions for {num_players} players:")
    print("=" * 60)
    for g in ScheduleCalculator.suggest_games_each(num_players, games_each):
        total = ScheduleCalculator.total_games(num_players, g)
        full_rounds, partial = ScheduleCalculator.round_plan(num_players, g)
        print(f"   • {g} games each → {total} games ({full_rounds} full rounds + {partial})")


def validate_and_report(
    schedule: Schedule, competitors: List[Competitor], games_each: int
) -> bool:
    print(f"\n🔍 Validating schedule constraints...")
    checks = [
        ("No self pairings", ScheduleValidator.validate_no_self_pairs(schedule.games)),
        (
            "Games per player",
            ScheduleValidator.validate_games_per_competitor(
                schedule.games, competitors, games_each
            ),
        ),
        ("Full rounds", ScheduleValidator.validate_full_rounds(schedule)),
        (
            "Partial round",
            ScheduleValidator.validate_partial_round(schedule, len(competitors), games_each),
        ),
    ]

    all_valid = True
    for label, (valid, violations) in checks:
        print(f"{'✅' if valid else '❌'} {label}: {'PASSED' if valid else 'FAILED'}")
        for violation in violations[:3]:
            print(f"   ❌ {violation}")
        all_valid = all_valid and valid

    print(
        f"\n🎯 Overall validation: {'✅ ALL CONSTRAINTS SATISFIED' if all_valid else '❌ CONSTRAINT VIOLATIONS FOUND'}"
    )
    return all_valid


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Round-Robin Tournament Scheduler")
    players = parser.add_mutually_exclusive_group()
    players.add_argument("--players", type=int, help="Number of players (named Player 1..N)")
    players.add_argument("--names", nargs="+", help="Player names")
    parser.add_argument("--games-each", type=int, help="Games each player plays (default N-1)")
    parser.add_argument("--name", default="Round-Robin Tournament", help="Tournament name")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible schedules")
    parser.add_argument(
        "--max-attempts", type=int, help="Maximum attempts for the final partial round"
    )
    parser.add_argument(
        "--no-solver-fallback",
        action="store_true",
        help="Fail instead of using OR-Tools when greedy attempts for the partial round run out",
    )
    parser.add_argument("--config", type=str, help="JSON configuration file")
    parser.add_argument("--save-example", type=str, help="Save example config to file")
    parser.add_argument("--export-csv", type=str, help="Export schedule to CSV file")
    parser.add_argument("--json", action="store_true", help="Print the schedule as JSON")
    parser.add_argument(
        "--suggest-games", type=int, help="Show feasible games-each values for N players"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--test", action="store_true", help="Run unit tests")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main command line interface"""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if args.test:
        print("🧪 Running unit tests...")
        return 0 if run_all_tests() else 1

    if args.suggest_games:
        show_games_suggestions(args.suggest_games, args.games_each)
        return 0

    if args.save_example:
        tournament, scheduler_config = create_example_tournament()
        save_config(args.save_example, tournament, scheduler_config)
        print(f"📁 Example configuration saved to {args.save_example}")
        return 0

    # Determine configuration source
    try:
        if args.config:
            tournament, scheduler_config = load_config(args.config)
            print(f"📁 Loaded configuration from {args.config}")
        elif args.players or args.names:
            names = args.names or [f"Player {i}" for i in range(1, args.players + 1)]
            games_each = args.games_each if args.games_each is not None else len(names) - 1
            tournament = TournamentConfig(
                name=args.name, players=names, games_each=games_each, seed=args.seed
            )
            scheduler_config = SchedulerConfig()
        else:
            print("❌ Please specify --players N, --names, --config, --suggest-games N, or --save-example")
            parser.print_help()
            return 2

        if args.seed is not None:
            tournament.seed = args.seed
        if args.max_attempts is not None:
            scheduler_config = replace(scheduler_config, max_partial_attempts=args.max_attempts)
        if args.no_solver_fallback:
            scheduler_config = replace(scheduler_config, solver_fallback=False)
    except (OSError, KeyError, TypeError, ValueError) as e:
        print(f"❌ Error loading configuration: {e}")
        return 2

    competitors = [Competitor(name) for name in tournament.players]
    rng = random.Random(tournament.seed)

    logger.info(f"🚀 Generating schedule for {tournament.name}...")
    try:
        builder = ScheduleBuilder(
            competitors, tournament.games_each, rng=rng, config=scheduler_config
        )
        schedule = builder.build()
    except ConfigurationError as e:
        logger.error(f"❌ {e}")
        show_games_suggestions(len(competitors), tournament.games_each)
        return 1
    except SchedulingExhausted as e:
        logger.error(f"❌ {e}")
        print("💡 Try again with a different seed, or a higher --max-attempts")
        return 1

    # Always validate constraints
    if args.json:
        print(json.dumps(schedule_to_dict(schedule), indent=2, ensure_ascii=False))
        all_valid, violations = ScheduleValidator.validate_all(
            schedule, competitors, tournament.games_each
        )
        for violation in violations:
            logger.error(f"❌ {violation}")
    else:
        print_schedule_summary(schedule, tournament)
        all_valid = validate_and_report(schedule, competitors, tournament.games_each)

    if args.export_csv:
        export_csv(schedule, args.export_csv)
        print(f"💾 Schedule exported to {args.export_csv}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
