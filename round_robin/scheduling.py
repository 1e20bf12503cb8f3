"""Core scheduling logic: greedy round ordering, partial round retries and OR-Tools fallback."""

import logging
import random
import time as time_module
from typing import List, Optional, Sequence, Tuple

from ortools.sat.python import cp_model

from round_robin.models import (
    Competitor,
    ConfigurationError,
    Game,
    InfeasibleConfiguration,
    Matchup,
    Schedule,
    SchedulerConfig,
    SchedulingExhausted,
    SchedulingState,
)

logger = logging.getLogger(__name__)


class ScheduleCalculator:
    """Calculate round structure for a tournament"""

    @staticmethod
    def games_per_full_round(num_competitors: int) -> int:
        """Every competitor plays every other once: n*(n-1)/2"""
        if num_competitors < 2:
            return 0
        return num_competitors * (num_competitors - 1) // 2

    @staticmethod
    def total_games(num_competitors: int, games_each: int) -> int:
        return num_competitors * games_each // 2

    @staticmethod
    def round_plan(num_competitors: int, games_each: int) -> Tuple[int, int]:
        """Return (number of full rounds, games in the partial round)"""
        full_round = ScheduleCalculator.games_per_full_round(num_competitors)
        return divmod(ScheduleCalculator.total_games(num_competitors, games_each), full_round)

    @staticmethod
    def is_feasible(num_competitors: int, games_each: int) -> bool:
        """An odd field with an odd number of games each leaves half a game over"""
        return not (num_competitors % 2 == 1 and games_each % 2 == 1)

    @staticmethod
    def suggest_games_each(num_competitors: int, games_each: int) -> List[int]:
        """Nearest feasible games-each values, closest first"""
        if ScheduleCalculator.is_feasible(num_competitors, games_each):
            return [games_each]
        return [g for g in (games_each - 1, games_each + 1) if g > 0]


def enumerate_matchups(num_competitors: int) -> List[Matchup]:
    """All unique matchups (nC2), in registry order"""
    matchups = []
    for i in range(num_competitors):
        for j in range(i + 1, num_competitors):
            matchups.append(Matchup(i, j))
    return matchups


def select_best_matchup(pool: Sequence[Matchup], state: SchedulingState) -> Matchup:
    """Greedy choice: lowest combined load, then least recently played.

    ``min`` keeps the first of equal candidates, so remaining ties fall back
    to pool order.
    """
    return min(pool, key=lambda m: (state.load(m), state.recency(m)))


def select_random_matchup(
    pool: Sequence[Matchup], state: SchedulingState, rng: random.Random
) -> Matchup:
    """Random choice among the matchups with the lowest combined load"""
    lowest = min(state.load(m) for m in pool)
    return rng.choice([m for m in pool if state.load(m) == lowest])


class CompetitorRegistry:
    """Maps scheduling indices back to the caller's competitors"""

    def __init__(self, competitors: Sequence[Competitor]):
        seen = set()
        for competitor in competitors:
            if id(competitor) in seen:
                raise ConfigurationError(f"Competitor {competitor.name} is listed more than once")
            seen.add(id(competitor))
        self.competitors = list(competitors)

    def __len__(self) -> int:
        return len(self.competitors)

    def __getitem__(self, index: int) -> Competitor:
        return self.competitors[index]

    def new_state(self) -> SchedulingState:
        return SchedulingState.fresh(len(self.competitors))


class RoundScheduler:
    """Order every matchup of a full round"""

    def __init__(self, rng: random.Random):
        self.rng = rng

    def schedule(self, universe: Sequence[Matchup], state: SchedulingState) -> List[Matchup]:
        """Commit each matchup once on ``state`` and return them in play order"""
        pool = list(universe)
        self.rng.shuffle(pool)
        return self.order(pool, state)

    @staticmethod
    def order(pool: List[Matchup], state: SchedulingState) -> List[Matchup]:
        ordered = []
        while pool:
            best = select_best_matchup(pool, state)
            pool.remove(best)
            ordered.append(best)
            state.commit(best)
        return ordered


class PartialRoundResolver:
    """Fill the ragged final round with copy-and-retry greedy attempts"""

    def __init__(self, games_each: int, rng: random.Random, config: SchedulerConfig):
        self.games_each = games_each
        self.rng = rng
        self.config = config
        self.attempts = 0

    def schedule(
        self, universe: Sequence[Matchup], state: SchedulingState, remainder: int
    ) -> Tuple[List[Matchup], SchedulingState]:
        """Return the partial round and the state after it.

        ``state`` itself is never modified; the caller adopts the returned
        state only on success.
        """
        self.attempts = 0
        if remainder == 0:
            return [], state

        for attempt in range(1, self.config.max_partial_attempts + 1):
            self.attempts = attempt
            trial = state.clone()
            # The first attempt follows the heuristic exactly; later ones explore
            chosen = self._attempt(universe, trial, remainder, explore=attempt > 1)
            if chosen is not None:
                logger.debug(f"Partial round of {remainder} games filled on attempt {attempt}")
                return chosen, trial
            logger.debug(
                f"Partial round attempt {attempt} stuck, retrying with a new shuffle"
            )

        logger.warning(
            f"Partial round of {remainder} games not filled after {self.attempts} attempts"
        )
        if self.config.solver_fallback:
            solver = ORToolsPartialRoundSolver(self.games_each, self.rng, self.config)
            return solver.solve(universe, state, remainder)

        raise SchedulingExhausted(
            f"Could not schedule the final partial round of {remainder} games "
            f"after {self.attempts} attempts",
            attempts=self.attempts,
            remainder=remainder,
        )

    def _attempt(
        self,
        universe: Sequence[Matchup],
        trial: SchedulingState,
        remainder: int,
        explore: bool = False,
    ) -> Optional[List[Matchup]]:
        pool = list(universe)
        self.rng.shuffle(pool)
        pool = self._prune(pool, trial)

        chosen = []
        while len(chosen) < remainder:
            if not pool:
                return None
            if explore:
                best = select_random_matchup(pool, trial, self.rng)
            else:
                best = select_best_matchup(pool, trial)
            pool.remove(best)
            chosen.append(best)
            trial.commit(best)
            pool = self._prune(pool, trial)
        return chosen

    def _prune(self, pool: List[Matchup], trial: SchedulingState) -> List[Matchup]:
        """Drop matchups touching anyone who already has all their games"""
        return [
            m
            for m in pool
            if not (
                trial.is_capped(m.a, self.games_each) or trial.is_capped(m.b, self.games_each)
            )
        ]


class ORToolsPartialRoundSolver:
    """CP-SAT selection of the partial round's matchups when greedy attempts run out"""

    def __init__(self, games_each: int, rng: random.Random, config: SchedulerConfig):
        self.games_each = games_each
        self.rng = rng
        self.config = config

    def solve(
        self, universe: Sequence[Matchup], state: SchedulingState, remainder: int
    ) -> Tuple[List[Matchup], SchedulingState]:
        start_time = time_module.time()
        model = cp_model.CpModel()

        picks = [model.new_bool_var(f"pick_{m.a}_{m.b}") for m in universe]
        model.add(sum(picks) == remainder)

        # Nobody may exceed their games-each total
        for index in range(len(state.times_scheduled)):
            touching = [var for m, var in zip(universe, picks) if m.involves(index)]
            if touching:
                model.add(sum(touching) <= self.games_each - state.times_scheduled[index])

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.config.solver_time_limit
        solver.parameters.random_seed = self.rng.randrange(2**31)
        solver.parameters.num_workers = 1  # Deterministic for a given seed
        status = solver.solve(model)

        logger.info(
            f"OR-Tools partial round solver finished with status {solver.status_name(status)} "
            f"in {time_module.time() - start_time:.2f} seconds"
        )
        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            raise SchedulingExhausted(
                f"OR-Tools solver could not fill the partial round of {remainder} games "
                f"(status: {solver.status_name(status)})",
                remainder=remainder,
            )

        selected = [m for m, var in zip(universe, picks) if solver.value(var)]
        self.rng.shuffle(selected)
        trial = state.clone()
        return RoundScheduler.order(selected, trial), trial


class ScheduleBuilder:
    """Build a schedule for a list of competitors.

    Validation happens on construction, so an infeasible configuration is
    rejected before any scheduling work starts.
    """

    def __init__(
        self,
        competitors: Sequence[Competitor],
        games_each: int,
        rng: Optional[random.Random] = None,
        config: Optional[SchedulerConfig] = None,
    ):
        if rng is None:
            rng = random.Random()
        if config is None:
            config = SchedulerConfig()

        if len(competitors) < 2:
            raise ConfigurationError("Cannot build schedule: at least 2 competitors are required")
        if games_each <= 0:
            raise ConfigurationError("Cannot build schedule: the number of games each must be positive")
        if not ScheduleCalculator.is_feasible(len(competitors), games_each):
            raise InfeasibleConfiguration(
                "Cannot build schedule: if the number of players is odd, "
                "then the number of games each must be even"
            )

        self.registry = CompetitorRegistry(competitors)
        self.games_each = games_each
        self.rng = rng
        self.config = config

        self.num_games_total = ScheduleCalculator.total_games(len(competitors), games_each)
        self.games_per_full_round = ScheduleCalculator.games_per_full_round(len(competitors))
        self.num_full_rounds, self.num_games_in_partial_round = ScheduleCalculator.round_plan(
            len(competitors), games_each
        )

    def build(self) -> Schedule:
        """Run every full round, then the partial round, and package the games"""
        start_time = time_module.time()
        logger.info(
            f"Scheduling {len(self.registry)} competitors x {self.games_each} games each: "
            f"{self.num_games_total} games in {self.num_full_rounds} full round(s) "
            f"of {self.games_per_full_round} + partial round of {self.num_games_in_partial_round}"
        )

        universe = enumerate_matchups(len(self.registry))
        state = self.registry.new_state()
        scheduled: List[Matchup] = []

        round_scheduler = RoundScheduler(self.rng)
        for _ in range(self.num_full_rounds):
            scheduled.extend(round_scheduler.schedule(universe, state))

        resolver = PartialRoundResolver(self.games_each, self.rng, self.config)
        partial, state = resolver.schedule(universe, state, self.num_games_in_partial_round)
        scheduled.extend(partial)

        schedule = Schedule(self._convert_to_games(scheduled), self.games_per_full_round)
        logger.info(
            f"Schedule generated: {len(schedule)} games in {schedule.num_rounds()} round(s) "
            f"in {time_module.time() - start_time:.2f} seconds"
        )
        return schedule

    def _convert_to_games(self, matchups: List[Matchup]) -> List[Game]:
        """Map matchups back to competitors, in random display order"""
        games = []
        for matchup in matchups:
            first, second = self.registry[matchup.a], self.registry[matchup.b]
            if self.rng.random() < 0.5:
                first, second = second, first
            games.append(Game(first, second))
        return games


def build_schedule(
    competitors: Sequence[Competitor],
    games_each: int,
    rng: Optional[random.Random] = None,
    config: Optional[SchedulerConfig] = None,
) -> Schedule:
    """Build a schedule in one call"""
    return ScheduleBuilder(competitors, games_each, rng=rng, config=config).build()
