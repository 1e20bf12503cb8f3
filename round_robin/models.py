"""Data models for round-robin tournament scheduling."""

from dataclasses import dataclass
from typing import Iterator, List, Optional


class SchedulingError(Exception):
    """Base class for all schedule generation failures"""


class ConfigurationError(SchedulingError, ValueError):
    """The requested tournament cannot be scheduled as configured"""


class InfeasibleConfiguration(ConfigurationError):
    """Odd number of competitors with an odd number of games each"""


class SchedulingExhausted(SchedulingError):
    """The partial round could not be filled within the attempt limit"""

    def __init__(self, message: str, attempts: int = 0, remainder: int = 0):
        super().__init__(message)
        self.attempts = attempts
        self.remainder = remainder


@dataclass
class SchedulerConfig:
    """Tuning parameters for the scheduling run"""

    max_partial_attempts: int = 1000
    solver_fallback: bool = True  # Ask CP-SAT for the partial round if greedy attempts run out
    solver_time_limit: float = 10.0  # seconds

    def __post_init__(self):
        """Validate configuration after initialization"""
        if self.max_partial_attempts < 1:
            raise ValueError("Maximum partial round attempts must be at least 1")
        if self.solver_time_limit <= 0:
            raise ValueError("Solver time limit must be positive")


@dataclass
class TournamentConfig:
    """Tournament configuration parameters"""

    name: str
    players: List[str]
    games_each: int
    seed: Optional[int] = None

    def __post_init__(self):
        """Validate configuration after initialization"""
        if len(self.players) < 2:
            raise ValueError("A tournament needs at least 2 players")
        if self.games_each <= 0:
            raise ValueError("Number of games each must be positive")


@dataclass(eq=False)
class Competitor:
    """Tournament participant. Identity is the object itself, not the name."""

    name: str
    wins: int = 0
    games_played: int = 0
    rallies_won: int = 0
    rallies_lost: int = 0

    @property
    def ratio(self) -> float:
        """Rallies won per rally lost, rounded to 2 decimal places"""
        return round(self.rallies_won / max(self.rallies_lost, 1), 2)

    def record_result(self, rallies_won: int, rallies_lost: int):
        """Update statistics after a game"""
        self.games_played += 1
        self.rallies_won += rallies_won
        self.rallies_lost += rallies_lost
        if rallies_won > rallies_lost:
            self.wins += 1

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class Matchup:
    """Unordered pair of two distinct competitors, by registry index (a < b)"""

    a: int
    b: int

    def __post_init__(self):
        if self.a == self.b:
            raise ValueError(f"Matchup cannot pair competitor {self.a} with itself")
        if self.a > self.b:
            low, high = self.b, self.a
            object.__setattr__(self, "a", low)
            object.__setattr__(self, "b", high)

    def involves(self, index: int) -> bool:
        return index == self.a or index == self.b


@dataclass
class SchedulingState:
    """Arena of per-competitor scheduling counters, indexed like the registry"""

    times_scheduled: List[int]
    last_scheduled_at: List[int]
    match_index: int = 0  # Total matchups committed so far

    @classmethod
    def fresh(cls, num_competitors: int) -> "SchedulingState":
        return cls([0] * num_competitors, [0] * num_competitors)

    def clone(self) -> "SchedulingState":
        return SchedulingState(
            list(self.times_scheduled), list(self.last_scheduled_at), self.match_index
        )

    def load(self, matchup: Matchup) -> int:
        """Outer greedy heuristic: combined number of matchups already committed"""
        return self.times_scheduled[matchup.a] + self.times_scheduled[matchup.b]

    def recency(self, matchup: Matchup) -> int:
        """Inner greedy heuristic: combined index of each side's last matchup"""
        return self.last_scheduled_at[matchup.a] + self.last_scheduled_at[matchup.b]

    def commit(self, matchup: Matchup):
        """Record a matchup as scheduled at the next global position"""
        self.match_index += 1
        for index in (matchup.a, matchup.b):
            self.times_scheduled[index] += 1
            self.last_scheduled_at[index] = self.match_index

    def is_capped(self, index: int, games_each: int) -> bool:
        return self.times_scheduled[index] >= games_each


@dataclass(eq=False)
class Game:
    """A committed matchup at a position in the schedule"""

    competitor_a: Competitor
    competitor_b: Competitor
    name_a: str = ""
    name_b: str = ""
    played: bool = False

    def __post_init__(self):
        if self.competitor_a is self.competitor_b:
            raise ValueError(f"{self.competitor_a.name} cannot play against themselves")
        if not self.name_a:
            self.name_a = self.competitor_a.name
        if not self.name_b:
            self.name_b = self.competitor_b.name

    def involves(self, competitor: Competitor) -> bool:
        return competitor is self.competitor_a or competitor is self.competitor_b

    def __str__(self):
        return f"{self.name_a} VS {self.name_b}"


@dataclass
class Schedule:
    """Ordered list of games split into fixed-size rounds.

    All creational logic belongs to ``ScheduleBuilder``; this class only
    answers queries and applies the reordering and bookkeeping the caller
    asks for. Competitors are referenced, not owned.
    """

    games: List[Game]
    games_per_full_round: int

    def __post_init__(self):
        if self.games_per_full_round <= 0:
            raise ValueError("Games per full round must be positive")

    def __len__(self) -> int:
        return len(self.games)

    def __iter__(self) -> Iterator[Game]:
        return iter(self.games)

    def game_at(self, index: int) -> Optional[Game]:
        """Return the game at ``index`` or None when out of range"""
        if index < 0 or index >= len(self.games):
            return None
        return self.games[index]

    def games_in_round(self, round_index: int) -> List[Game]:
        """Games in a single round, full or partial"""
        if round_index < 0:
            return []
        start = round_index * self.games_per_full_round
        if start >= len(self.games):
            return []
        end = min(start + self.games_per_full_round, len(self.games))
        return self.games[start:end]

    def num_rounds(self) -> int:
        full, partial = divmod(len(self.games), self.games_per_full_round)
        return full + 1 if partial else full

    def round_of(self, index: int) -> Optional[int]:
        """Round number of the game at ``index``"""
        if self.game_at(index) is None:
            return None
        return index // self.games_per_full_round

    def move_game(self, old_index: int, new_index: int):
        """Move a game so that it lands at ``new_index`` as counted before removal"""
        if old_index < 0 or old_index >= len(self.games):
            raise IndexError(f"No game at position {old_index}")
        if new_index < 0 or new_index > len(self.games):
            raise IndexError(f"Cannot move a game to position {new_index}")
        game = self.games.pop(old_index)
        if new_index > old_index:
            new_index -= 1
        self.games.insert(new_index, game)

    def mark_played(self, index: int):
        if self.game_at(index) is None:
            raise IndexError(f"No game at position {index}")
        self.games[index].played = True

    def record_result(self, index: int, score_a: int, score_b: int) -> Game:
        """Apply a final score to both competitors and mark the game played"""
        game = self.game_at(index)
        if game is None:
            raise IndexError(f"No game at position {index}")
        if game.played:
            raise ValueError(f"Game {index + 1} ({game}) has already been played")
        if score_a == score_b:
            raise ValueError("A game cannot end in a tie")
        game.competitor_a.record_result(score_a, score_b)
        game.competitor_b.record_result(score_b, score_a)
        game.played = True
        return game

    def next_game_index(self) -> Optional[int]:
        for index, game in enumerate(self.games):
            if not game.played:
                return index
        return None

    def next_game(self) -> Optional[Game]:
        """First game in schedule order that has not been played yet"""
        index = self.next_game_index()
        return None if index is None else self.games[index]

    def num_games_remaining(self) -> int:
        return sum(1 for game in self.games if not game.played)

    def rename_competitor(self, competitor: Competitor, name: Optional[str] = None) -> int:
        """Cascade a competitor's display name to every game they appear in.

        Matching is by identity, so two competitors sharing a name are kept
        apart. Returns the number of game slots updated.
        """
        if name is not None:
            competitor.name = name
        updated = 0
        for game in self.games:
            if game.competitor_a is competitor:
                game.name_a = competitor.name
                updated += 1
            elif game.competitor_b is competitor:
                game.name_b = competitor.name
                updated += 1
        return updated

    def clear(self):
        self.games.clear()

    def is_empty(self) -> bool:
        return not self.games
