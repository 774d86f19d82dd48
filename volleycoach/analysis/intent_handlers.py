"""
Divide and Conquer: intent-based deterministic answer synthesis.

Each intent is handled by an independent handler, making the system:
- Testable: Each handler can be tested independently
- Evolvable: New intents can be added without modifying existing code
- Total: Every handler returns non-empty text for any fact set, including
  an empty one
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from volleycoach.analysis.aggregator import LeaderEntry, best_passer, leader
from volleycoach.analysis.intent import Intent
from volleycoach.analysis.match_summary import OpponentSummary, tough_opponents
from volleycoach.analysis.season_facts import SeasonFacts
from volleycoach.config.bounds import SystemBounds
from volleycoach.narrative.lineup import project_lineup
from volleycoach.stats.categories import ACES, ASSISTS, BLOCKS, DIGS, KILLS, SERVE_ERRORS, StatCategory
from volleycoach.stats.normalizer import format_number

INSUFFICIENT_SEASON_MESSAGE = (
    "Insufficient data in the current dataset: no match_results and no player_game_stats "
    "were found for this team and season. Import match results and per-game player stats to get an answer."
)
INSUFFICIENT_MATCHES_MESSAGE = (
    "Win/loss record\n"
    "Insufficient data in the current dataset: no match_results were found for this team and season. "
    "Import match results (date, opponent, result, set differential) to get a record."
)
NO_LOSSES_MESSAGE = (
    "Toughest opponents\n"
    "No losses found in match_results for this season, or match results were unlabeled (expected W/L)."
)
INSUFFICIENT_LINEUP_MESSAGE = (
    "Projected lineup\n"
    "Insufficient data in the current dataset: no player_game_stats were found for this team and season. "
    "Import per-game player stats (setting_assists, attack_kills, serve_aces, digs_successful, blocks, "
    "serve_receive_attempts) to project a lineup."
)
LINEUP_CAVEAT = (
    "Caveat: this projection is built from season totals only. It does not know positions, "
    "rotation order or front/back-row eligibility, so confirm it against the roster before match day."
)


def unavailable_message(tables: List[str]) -> str:
    return (
        f"Season data is temporarily unavailable: {' and '.join(tables)} could not be loaded. "
        "This is a data-source problem, not missing data. Please try again shortly."
    )


def nice_name(name: str) -> str:
    return f"**{name}**"


def passer_line(player: str, rating: float, attempts: float) -> str:
    return f"{nice_name(player)} — {rating:.2f} (0–3 scale, weighted by attempts) on {format_number(attempts)} attempts"


def leader_line(entry: LeaderEntry, category: StatCategory) -> str:
    return f"{nice_name(entry.player)} — {format_number(entry.value)} {category.unit}"


def opponent_line(rank: int, opponent: OpponentSummary) -> str:
    return f"{rank}) {opponent.opponent} — losses {opponent.losses}/{opponent.matches}"


@dataclass
class HandlerContext:
    """
    Context passed to each handler.
    Contains the question, the aggregated facts and the system bounds.
    """
    question: str
    intent: Intent
    facts: SeasonFacts
    bounds: SystemBounds


class IntentHandler(ABC):
    """
    Base class for intent-specific answer handlers.

    Each handler:
    1. Declares which intents it can handle
    2. Composes a complete answer from aggregated facts alone
    3. Never returns empty text and never raises on sparse data
    """

    @abstractmethod
    def can_handle(self, intent: Intent) -> bool:
        """Check if this handler can process the given intent."""

    @abstractmethod
    def process(self, ctx: HandlerContext) -> str:
        """Compose the deterministic answer text."""


class PasserRatingHandler(IntentHandler):
    """
    Best weighted passer among players with enough serve-receive attempts.
    Intent: PASSER_RATING
    """

    def can_handle(self, intent: Intent) -> bool:
        return intent == Intent.PASSER_RATING

    def process(self, ctx: HandlerContext) -> str:
        minimum = ctx.bounds.min_passer_attempts
        best = best_passer(ctx.facts.totals, minimum)
        if best is None:
            return (
                "Best passer rating\n"
                f"Insufficient data in the current dataset: no player has at least {minimum} serve-receive attempts. "
                "Populate serve_receive_attempts and serve_receive_passing_rating in player_game_stats to answer this."
            )
        return f"Best passer rating\n{passer_line(best.player, best.rating, best.attempts)}"


class KillsLeaderHandler(IntentHandler):
    """
    Top player by total kills. A total of zero never leads.
    Intent: KILLS_LEADER
    """

    def can_handle(self, intent: Intent) -> bool:
        return intent == Intent.KILLS_LEADER

    def process(self, ctx: HandlerContext) -> str:
        top = leader(ctx.facts.totals, KILLS)
        if top is None:
            return (
                "Kills leader\n"
                "Insufficient data in the current dataset: no player has a recorded kill. "
                "Populate attack_kills in player_game_stats to answer this."
            )
        return f"Kills leader\n{leader_line(top, KILLS)}"


class WinLossRecordHandler(IntentHandler):
    """
    Literal season tally as wins-losses.
    Intent: WIN_LOSS_RECORD
    """

    def can_handle(self, intent: Intent) -> bool:
        return intent == Intent.WIN_LOSS_RECORD

    def process(self, ctx: HandlerContext) -> str:
        if not ctx.facts.has_matches:
            return INSUFFICIENT_MATCHES_MESSAGE
        return ctx.facts.matches.record.tally()


class ToughOpponentsHandler(IntentHandler):
    """
    Opponents ranked by losses, then by set differential.
    Intent: TOUGH_OPPONENTS
    """

    def can_handle(self, intent: Intent) -> bool:
        return intent == Intent.TOUGH_OPPONENTS

    def process(self, ctx: HandlerContext) -> str:
        ranked = tough_opponents(ctx.facts.matches, ctx.bounds.max_tough_opponents)
        if not ranked:
            return NO_LOSSES_MESSAGE
        lines = ["Opponents that caused the most trouble"]
        lines.extend(opponent_line(i, o) for i, o in enumerate(ranked, start=1))
        return "\n".join(lines)


class StrengthsWeaknessesHandler(IntentHandler):
    """
    Structured season narrative: record, strengths, weaknesses, next steps.
    Intent: STRENGTHS_WEAKNESSES
    """

    def can_handle(self, intent: Intent) -> bool:
        return intent == Intent.STRENGTHS_WEAKNESSES

    def process(self, ctx: HandlerContext) -> str:
        facts = ctx.facts
        if facts.is_empty():
            tables = facts.unavailable_tables()
            return unavailable_message(tables) if tables else INSUFFICIENT_SEASON_MESSAGE
        matches_down = not facts.has_matches and "matches" in facts.unavailable
        stats_down = not facts.has_stats and "stats" in facts.unavailable

        totals = facts.totals
        passer = best_passer(totals, ctx.bounds.min_passer_attempts)
        killer = leader(totals, KILLS)
        server = leader(totals, ACES)
        digger = leader(totals, DIGS)
        error_server = leader(totals, SERVE_ERRORS)
        opponents = tough_opponents(facts.matches, ctx.bounds.max_weakness_opponents)

        lines: List[str] = ["Season strengths and weaknesses", ""]
        if facts.has_matches:
            record = facts.matches.record
            lines.append(f"Record: {record.tally()} ({record.matches} matches)")
        elif matches_down:
            lines.append("Record: temporarily unavailable (match_results could not be loaded)")
        else:
            lines.append("Record: insufficient data (no match_results found for this season)")

        strengths: List[str] = []
        if passer:
            strengths.append(f"Serve receive: {passer_line(passer.player, passer.rating, passer.attempts)}")
        if killer:
            strengths.append(f"Offense: {nice_name(killer.player)} leads the team with {format_number(killer.value)} kills")
        if server:
            strengths.append(f"Serving: {nice_name(server.player)} leads with {format_number(server.value)} aces")
        if digger:
            strengths.append(f"Defense: {nice_name(digger.player)} leads with {format_number(digger.value)} digs")

        lines += ["", "Strengths"]
        if strengths:
            lines.extend(f"{i}) {s}" for i, s in enumerate(strengths, start=1))
        elif stats_down:
            lines.append("Temporarily unavailable: player_game_stats could not be loaded.")
        else:
            lines.append("Insufficient data: no stat leaders found in player_game_stats.")

        lines += ["", "Weaknesses"]
        if error_server:
            lines.append(
                f"• Serve errors: {nice_name(error_server.player)} has the most with {format_number(error_server.value)}"
            )
        if opponents:
            lines.append("• Opponents that caused the most trouble:")
            lines.extend(f"  {opponent_line(i, o)}" for i, o in enumerate(opponents, start=1))
        elif facts.has_matches:
            lines.append("• No repeat-loss opponent: no opponent has beaten this team in the recorded results.")
        elif matches_down:
            lines.append("• Opponent trouble: temporarily unavailable (match_results could not be loaded).")
        else:
            lines.append("• Opponent trouble: insufficient data (no match_results found).")

        actions: List[str] = []
        if passer:
            actions.append(f"Build serve-receive patterns around {nice_name(passer.player)} and keep that passing stable.")
        if killer:
            actions.append(f"Keep feeding {nice_name(killer.player)} in transition and out-of-system swings.")
        if error_server:
            actions.append(
                f"Run a serving block with {nice_name(error_server.player)} focused on in-rate before adding pace."
            )
        if opponents:
            actions.append(f"Scout {opponents[0].opponent} again and rehearse the rotations that lost those sets.")
        if server:
            actions.append(f"Keep {nice_name(server.player)} serving aggressively; the aces are paying off.")

        lines += ["", "What to do next"]
        if actions:
            lines.extend(f"{i}) {a}" for i, a in enumerate(actions, start=1))
        else:
            lines.append("Import more per-game stats so specific recommendations can be made.")
        return "\n".join(lines)


class ProjectedLineupHandler(IntentHandler):
    """
    Six-player projection from season leaders with bench suggestions.
    Intent: PROJECTED_LINEUP
    """

    def can_handle(self, intent: Intent) -> bool:
        return intent == Intent.PROJECTED_LINEUP

    def process(self, ctx: HandlerContext) -> str:
        if not ctx.facts.has_stats:
            if "stats" in ctx.facts.unavailable:
                return "Projected lineup\n" + unavailable_message(["player_game_stats"])
            return INSUFFICIENT_LINEUP_MESSAGE

        projection = project_lineup(ctx.facts.totals, ctx.bounds)
        if not projection.starters:
            return INSUFFICIENT_LINEUP_MESSAGE

        lines: List[str] = ["Projected starting lineup (best available from season stats)", ""]
        if projection.setter:
            lines.append(f"Setter: {leader_line(projection.setter, ASSISTS)}")
        else:
            lines.append("Setter: insufficient data (no setting_assists recorded)")
        if projection.passer:
            p = projection.passer
            lines.append(f"Libero / primary passer: {passer_line(p.player, p.rating, p.attempts)}")
        else:
            lines.append(
                f"Libero / primary passer: insufficient data (no player with {ctx.bounds.min_passer_attempts}+ serve-receive attempts)"
            )
        labels = ["Primary scorer", "Secondary scorer"]
        for label, hitter in zip(labels, projection.hitters):
            lines.append(f"{label}: {leader_line(hitter, KILLS)}")
        if projection.server:
            lines.append(f"Serve pressure: {leader_line(projection.server, ACES)}")
        if projection.blocker:
            lines.append(f"Blocking: {leader_line(projection.blocker, BLOCKS)}")

        lines.append("")
        lines.append(f"Starting {len(projection.starters)}: " + ", ".join(nice_name(p) for p in projection.starters))
        if len(projection.starters) < ctx.bounds.lineup_size:
            lines.append(f"Only {len(projection.starters)} players have usable stats, so the lineup is incomplete.")

        lines += ["", "Bench recommendations"]
        lines.append(_bench_line("Next hitter", projection.next_hitter, KILLS))
        lines.append(_bench_line("Alternate defender", projection.alternate_defender, DIGS))
        lines.append(_bench_line("Backup setter", projection.backup_setter, ASSISTS))

        lines += ["", LINEUP_CAVEAT]
        return "\n".join(lines)


def _bench_line(label: str, entry: Optional[LeaderEntry], category: StatCategory) -> str:
    if entry is None:
        return f"• {label}: no candidate outside the starting group"
    return f"• {label}: {leader_line(entry, category)}"


class GenericBroadHandler(IntentHandler):
    """
    Fallback handler: answers open questions with the strengths/weaknesses
    narrative. Must be last.
    """

    def __init__(self, delegate: Optional[IntentHandler] = None):
        self.delegate = delegate or StrengthsWeaknessesHandler()

    def can_handle(self, intent: Intent) -> bool:
        return True

    def process(self, ctx: HandlerContext) -> str:
        return self.delegate.process(ctx)
