"""Constraint validation for generated schedules."""

from collections import Counter
from typing import List, Sequence, Tuple

from round_robin.models import Competitor, Game, Schedule
from round_robin.scheduling import ScheduleCalculator


class ScheduleValidator:
    """Helper class to validate schedule constraints"""

    @staticmethod
    def validate_no_self_pairs(games: Sequence[Game]) -> Tuple[bool, List[str]]:
        """Validate that no game pairs a competitor with themselves"""
        violations = []
        for index, game in enumerate(games):
            if game.competitor_a is game.competitor_b:
                violations.append(
                    f"Game {index + 1}: {game.competitor_a.name} is paired with themselves"
                )
        return len(violations) == 0, violations

    @staticmethod
    def validate_games_per_competitor(
        games: Sequence[Game], competitors: Sequence[Competitor], games_each: int
    ) -> Tuple[bool, List[str]]:
        """Validate that every competitor plays exactly ``games_each`` games"""
        violations = []
        counts = Counter()
        for game in games:
            counts[id(game.competitor_a)] += 1
            counts[id(game.competitor_b)] += 1

        for competitor in competitors:
            count = counts.pop(id(competitor), 0)
            if count != games_each:
                violations.append(
                    f"Competitor {competitor.name}: scheduled for {count} games "
                    f"(expected {games_each})"
                )

        if counts:
            violations.append(
                f"{len(counts)} competitor(s) in the schedule are not part of the tournament"
            )

        return len(violations) == 0, violations

    @staticmethod
    def validate_full_rounds(schedule: Schedule) -> Tuple[bool, List[str]]:
        """Validate that each full round holds every pairing exactly once"""
        violations = []
        expected = schedule.games_per_full_round

        for round_index in range(schedule.num_rounds()):
            games = schedule.games_in_round(round_index)
            if len(games) < expected:
                continue  # The partial round is checked separately

            pairings = Counter(
                frozenset((id(g.competitor_a), id(g.competitor_b))) for g in games
            )
            repeated = [pair for pair, count in pairings.items() if count > 1]
            if repeated:
                violations.append(
                    f"Round {round_index + 1}: {len(repeated)} pairing(s) scheduled more than once"
                )
            if len(pairings) != expected:
                violations.append(
                    f"Round {round_index + 1}: expected {expected} distinct pairings, "
                    f"but found {len(pairings)}"
                )

        return len(violations) == 0, violations

    @staticmethod
    def validate_partial_round(
        schedule: Schedule, num_competitors: int, games_each: int
    ) -> Tuple[bool, List[str]]:
        """Validate the size of the ragged final round"""
        violations = []
        total = ScheduleCalculator.total_games(num_competitors, games_each)
        _, remainder = ScheduleCalculator.round_plan(num_competitors, games_each)

        if len(schedule) != total:
            violations.append(f"Expected {total} games in total, but found {len(schedule)}")

        actual = len(schedule) % schedule.games_per_full_round
        if actual > remainder:
            violations.append(
                f"Partial round has {actual} games, more than the {remainder} allowed"
            )

        return len(violations) == 0, violations

    @staticmethod
    def validate_all(
        schedule: Schedule, competitors: Sequence[Competitor], games_each: int
    ) -> Tuple[bool, List[str]]:
        """Validate all constraints at once"""
        all_violations = []

        self_valid, self_violations = ScheduleValidator.validate_no_self_pairs(schedule.games)
        count_valid, count_violations = ScheduleValidator.validate_games_per_competitor(
            schedule.games, competitors, games_each
        )
        round_valid, round_violations = ScheduleValidator.validate_full_rounds(schedule)
        partial_valid, partial_violations = ScheduleValidator.validate_partial_round(
            schedule, len(competitors), games_each
        )

        all_violations.extend(self_violations)
        all_violations.extend(count_violations)
        all_violations.extend(round_violations)
        all_violations.extend(partial_violations)

        overall_valid = self_valid and count_valid and round_valid and partial_valid
        return overall_valid, all_violations
