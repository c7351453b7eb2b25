"""Aggregate team statistics from parsed battles."""
import json
import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from ..config import AnalyticsConfig
from ..data.models import BattleFacts, MatchInfo, Outcome
from ..data.names import normalize_pokemon_name
from ..data.parser import parse_battle_log
from .metrics import mean_rounded, optional_percent, percent
from .models import (
    CustomMatchupResponse, CustomPokemonAnalysis, LeadPairStats, MatchupStats,
    MatchupStatsResponse, MoveStats, MoveUsageResponse, PokemonMoveStats,
    PokemonUsageStats, ReplayRecord, UsageStatsResponse,
)

logger = logging.getLogger(__name__)


def identify_side(facts: BattleFacts, own_names: Iterable[str]) -> str:
    """Side key ("p1"/"p2") of the team's owner, defaulting to p1."""
    for name in own_names:
        side = facts.side_of(name)
        if side is not None:
            return side

    logger.warning(f"Could not identify own player in {facts.player1} vs {facts.player2}, defaulting to player1")
    return "p1"


def opponent_of(side: str) -> str:
    return "p2" if side == "p1" else "p1"


def lead_pair_key(lead1: str, lead2: str, separator: str = " + ") -> str:
    """Order-independent key for a pair of leads."""
    first, second = sorted((lead1, lead2))
    return f"{first}{separator}{second}"


@dataclass
class _UsageTracker:
    usage: int = 0
    wins: int = 0
    lead_usage: int = 0
    lead_wins: int = 0
    tera_usage: int = 0
    tera_wins: int = 0


@dataclass
class _PairTracker:
    pokemon1: str
    pokemon2: str
    usage: int = 0
    wins: int = 0


@dataclass
class _MatchupTracker:
    games_against: int = 0
    wins_against: int = 0
    times_on_team: int = 0
    times_brought: int = 0


@dataclass
class _MoveTracker:
    times_used: int = 0
    games_used: int = 0
    wins_with_move: int = 0


class TeamAnalytics:
    """Compute usage, matchup and move statistics for one team's replays.

    Replays whose facts could not be parsed are left out of every statistic,
    denominators included.
    """

    def __init__(
        self,
        records: Optional[Iterable[ReplayRecord]] = None,
        config: Optional[AnalyticsConfig] = None,
    ):
        self.config = config or AnalyticsConfig()
        self.records: List[ReplayRecord] = []
        # Parseable records with the owner's side, resolved once on add
        self._resolved: List[Tuple[ReplayRecord, str]] = []
        for record in records or []:
            self.add_record(record)

    def add_record(self, record: ReplayRecord) -> None:
        """Add a parsed replay to aggregate."""
        self.records.append(record)
        if record.facts.is_empty:
            logger.debug(f"Skipping unparseable replay {record.replay_id}")
            return
        self._resolved.append((record, identify_side(record.facts, record.own_names)))

    def add_replay(
        self,
        raw: str,
        outcome: Outcome,
        own_names: List[str],
        replay_id: Optional[str] = None,
    ) -> None:
        """Parse raw replay JSON and add it."""
        self.add_record(ReplayRecord(
            facts=parse_battle_log(raw),
            outcome=outcome,
            own_names=own_names,
            replay_id=replay_id,
        ))

    def load_from_jsonl(
        self, path: Path, own_names: List[str],
    ) -> List[Tuple[str, MatchInfo, Outcome]]:
        """Load replays from a JSONL file written by fetch_replays.py.

        Each line carries "battle_log", "result" and optionally "id",
        "match_id" and "game_number".

        Returns:
            (replay_id, MatchInfo, Outcome) per loaded replay, for match grouping
        """
        games = []
        with open(path) as f:
            for line in f:
                if not line.strip():
                    continue
                entry = json.loads(line)
                replay_id = entry.get("id")
                outcome = Outcome(entry["result"])
                self.add_replay(entry["battle_log"], outcome, own_names, replay_id=replay_id)

                match_id = entry.get("match_id")
                info = MatchInfo(
                    is_bo3=match_id is not None,
                    match_id=match_id,
                    game_number=entry.get("game_number"),
                )
                games.append((replay_id or "unknown", info, outcome))
        return games

    def _battles(self) -> List[Tuple[ReplayRecord, str]]:
        """Parseable records with the owner's side resolved."""
        return list(self._resolved)

    def usage_stats(self) -> UsageStatsResponse:
        """Per-Pokemon usage and lead pair statistics."""
        battles = self._battles()
        if not battles:
            return UsageStatsResponse([], [], 0, 0)

        total_games = len(battles)
        total_wins = sum(1 for record, _ in battles if record.is_win)
        trackers: Dict[str, _UsageTracker] = defaultdict(_UsageTracker)

        for record, side_key in battles:
            side = record.facts.side(side_key)
            for pokemon in side.picks:
                tracker = trackers[normalize_pokemon_name(pokemon)]
                tracker.usage += 1
                if record.is_win:
                    tracker.wins += 1

                if pokemon in side.leads:
                    tracker.lead_usage += 1
                    if record.is_win:
                        tracker.lead_wins += 1

                if pokemon == side.terastallized:
                    tracker.tera_usage += 1
                    if record.is_win:
                        tracker.tera_wins += 1

        pokemon_stats = [
            PokemonUsageStats(
                pokemon=name,
                usage=t.usage,
                usage_rate=percent(t.usage, total_games),
                overall_win_rate=percent(t.wins, t.usage),
                lead_usage=t.lead_usage,
                lead_win_rate=optional_percent(t.lead_wins, t.lead_usage),
                tera_usage=t.tera_usage,
                tera_win_rate=optional_percent(t.tera_wins, t.tera_usage),
            )
            for name, t in trackers.items()
        ]
        pokemon_stats.sort(key=lambda s: (-s.usage, s.pokemon))

        return UsageStatsResponse(
            pokemon_stats=pokemon_stats,
            lead_pair_stats=self._lead_pair_stats(battles, total_games),
            average_win_rate=percent(total_wins, total_games),
            total_games=total_games,
        )

    def lead_pair_stats(self) -> List[LeadPairStats]:
        battles = self._battles()
        return self._lead_pair_stats(battles, len(battles))

    def _lead_pair_stats(self, battles: List[Tuple[ReplayRecord, str]], total_games: int) -> List[LeadPairStats]:
        separator = self.config.lead_pair_separator
        trackers: Dict[str, _PairTracker] = {}

        for record, side_key in battles:
            leads = record.facts.side(side_key).leads
            if len(leads) != 2:
                continue

            first, second = sorted(normalize_pokemon_name(lead) for lead in leads)
            key = lead_pair_key(first, second, separator)
            tracker = trackers.setdefault(key, _PairTracker(first, second))
            tracker.usage += 1
            if record.is_win:
                tracker.wins += 1

        pairs = [
            LeadPairStats(
                pair=key,
                pokemon1=t.pokemon1,
                pokemon2=t.pokemon2,
                usage=t.usage,
                usage_rate=percent(t.usage, total_games),
                wins=t.wins,
                win_rate=percent(t.wins, t.usage),
            )
            for key, t in trackers.items()
        ]
        pairs.sort(key=lambda p: (-p.usage, p.pair))
        return pairs[: self.config.lead_pair_limit]

    def all_matchups(self) -> List[MatchupStats]:
        """Statistics for every Pokemon seen on an opponent's team sheet."""
        trackers: Dict[str, _MatchupTracker] = defaultdict(_MatchupTracker)

        for record, side_key in self._battles():
            opponent = record.facts.side(opponent_of(side_key))
            for pokemon in opponent.team:
                tracker = trackers[normalize_pokemon_name(pokemon)]
                tracker.times_on_team += 1
                # Counted per sheet appearance, whether or not it was brought
                tracker.games_against += 1
                if pokemon in opponent.picks:
                    tracker.times_brought += 1
                if record.is_win:
                    tracker.wins_against += 1

        return [
            MatchupStats(
                pokemon=name,
                games_against=t.games_against,
                wins_against=t.wins_against,
                win_rate=percent(t.wins_against, t.games_against),
                times_on_team=t.times_on_team,
                times_brought=t.times_brought,
                attendance_rate=optional_percent(t.times_brought, t.times_on_team),
            )
            for name, t in trackers.items()
        ]

    def matchup_stats(self) -> MatchupStatsResponse:
        """Best/worst matchups and highest/lowest opponent attendance."""
        limit = self.config.matchup_list_limit
        eligible = [
            m for m in self.all_matchups()
            if m.games_against >= self.config.min_matchup_games
        ]
        with_attendance = [m for m in eligible if m.attendance_rate is not None]

        best = sorted(eligible, key=lambda m: (-m.win_rate, -m.games_against, m.pokemon))
        worst = sorted(eligible, key=lambda m: (m.win_rate, -m.games_against, m.pokemon))
        highest = sorted(with_attendance, key=lambda m: (-m.attendance_rate, -m.times_on_team, m.pokemon))
        lowest = sorted(with_attendance, key=lambda m: (m.attendance_rate, -m.times_on_team, m.pokemon))

        return MatchupStatsResponse(
            best_matchups=best[:limit],
            worst_matchups=worst[:limit],
            highest_attendance=highest[:limit],
            lowest_attendance=lowest[:limit],
        )

    def custom_matchup(self, opponent_pokemon: List[str]) -> CustomMatchupResponse:
        """Win rates against a composition of 4-6 opponent Pokemon.

        Each requested Pokemon is scored on its own; team_win_rate covers games
        where the opponent had any of them, total_encounters counts games where
        the opponent had all of them.
        """
        core: List[str] = []
        for name in opponent_pokemon:
            normalized = normalize_pokemon_name(name)
            if normalized and normalized not in core:
                core.append(normalized)
        core_set = set(core)

        trackers: Dict[str, _MatchupTracker] = {}
        any_count = any_wins = exact_count = 0

        for record, side_key in self._battles():
            opponent_team = {
                normalize_pokemon_name(p) for p in record.facts.side(opponent_of(side_key)).team
            }

            had_any = False
            for pokemon in core:
                if pokemon in opponent_team:
                    had_any = True
                    tracker = trackers.setdefault(pokemon, _MatchupTracker())
                    tracker.games_against += 1
                    if record.is_win:
                        tracker.wins_against += 1

            if had_any:
                any_count += 1
                if record.is_win:
                    any_wins += 1

            if core_set and core_set <= opponent_team:
                exact_count += 1

        analysis = [
            CustomPokemonAnalysis(
                pokemon=pokemon,
                games_against=trackers[pokemon].games_against,
                wins_against=trackers[pokemon].wins_against,
                win_rate=percent(trackers[pokemon].wins_against, trackers[pokemon].games_against),
            )
            for pokemon in core if pokemon in trackers
        ]
        # Stable sort keeps request order among ties
        analysis.sort(key=lambda a: -a.games_against)

        return CustomMatchupResponse(
            pokemon_analysis=analysis,
            team_win_rate=percent(any_wins, any_count),
            total_encounters=exact_count,
            average_win_rate=mean_rounded([a.win_rate for a in analysis]),
        )

    def move_usage_stats(self) -> MoveUsageResponse:
        """Move usage for every Pokemon the team brought."""
        games_brought: Dict[str, int] = defaultdict(int)
        trackers: Dict[str, Dict[str, _MoveTracker]] = defaultdict(dict)

        for record, side_key in self._battles():
            side = record.facts.side(side_key)
            for pokemon in side.picks:
                name = normalize_pokemon_name(pokemon)
                games_brought[name] += 1
                move_trackers = trackers[name]

                for move, count in side.moves_for(pokemon).items():
                    tracker = move_trackers.setdefault(move, _MoveTracker())
                    tracker.times_used += count
                    tracker.games_used += 1
                    if record.is_win:
                        tracker.wins_with_move += 1

        pokemon_moves = []
        for name in sorted(games_brought):
            move_trackers = trackers[name]
            total_moves = sum(t.times_used for t in move_trackers.values())

            moves = [
                MoveStats(
                    move=move,
                    times_used=t.times_used,
                    usage_rate=percent(t.times_used, total_moves),
                    games_used=t.games_used,
                    win_rate=percent(t.wins_with_move, games_brought[name]),
                )
                for move, t in move_trackers.items()
            ]
            moves.sort(key=lambda m: (-m.times_used, m.move))

            pokemon_moves.append(PokemonMoveStats(
                pokemon=name,
                games_brought=games_brought[name],
                total_moves_used=total_moves,
                moves=moves,
            ))

        return MoveUsageResponse(pokemon_moves=pokemon_moves)
