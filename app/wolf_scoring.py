from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from pydantic import TypeAdapter, ValidationError

from app.schemas import (
    CustomResult,
    HoleResult,
    LabelResult,
    Medal,
    PlayerMedal,
    PlayerScore,
    RoundScores,
    ScoreLabel,
)

logger = logging.getLogger(__name__)

SCORE_VALUES = {
    ScoreLabel.eagle: -2,
    ScoreLabel.birdie: -1,
    ScoreLabel.par: 0,
    ScoreLabel.bogey: 1,
    ScoreLabel.double: 2,
}
PAR_VALUE = SCORE_VALUES[ScoreLabel.par]
MEDALS = (Medal.first, Medal.second, Medal.third)

_HOLE_RESULT = TypeAdapter(HoleResult)


def _as_hole_result(result: Any) -> Any:
    if isinstance(result, (LabelResult, CustomResult)):
        return result
    try:
        return _HOLE_RESULT.validate_python(result)
    except ValidationError:
        return None


def score_value(result: Any) -> int | None:
    """Hole result -> strokes relative to par. ``None`` means excluded, never 0."""
    resolved = _as_hole_result(result)
    if isinstance(resolved, LabelResult):
        return SCORE_VALUES[resolved.label]
    if isinstance(resolved, CustomResult):
        return resolved.value
    return None


def _hole_values(players: Sequence[str], hole: Mapping[str, Any]) -> list[tuple[str, int | None]]:
    return [(player, score_value(hole.get(player))) for player in players]


def calculate_total_scores(players: Sequence[str], holes: Sequence[Mapping[str, Any]]) -> PlayerScore:
    totals = {player: 0 for player in players}
    for hole in holes:
        for player, value in _hole_values(players, hole):
            if value is not None:
                totals[player] += value
    return totals


def _rank_points(size: int) -> list[int]:
    return [2 * (size - 1 - position) for position in range(size)]


def hole_wolf_points(players: Sequence[str], hole: Mapping[str, Any]) -> PlayerScore | None:
    """Points awarded on a single hole, or ``None`` when the hole does not count.

    Players are ranked best (lowest) first. Each position carries
    ``2 * (k - 1 - position)`` points and a tie group shares the average of the
    positions it covers, which for three players gives 4/2/0, 3/3/0, 4/1/1 and
    2/2/2.
    """
    values = _hole_values(players, hole)
    if any(value is None for _, value in values):
        return None
    if all(value == PAR_VALUE for _, value in values):
        return None

    ranked = sorted(values, key=lambda item: item[1])
    base = _rank_points(len(ranked))
    points: PlayerScore = {}
    start = 0
    while start < len(ranked):
        end = start
        while end + 1 < len(ranked) and ranked[end + 1][1] == ranked[start][1]:
            end += 1
        share = sum(base[start:end + 1]) // (end - start + 1)
        for player, _ in ranked[start:end + 1]:
            points[player] = share
        start = end + 1
    return {player: points[player] for player in players}


def calculate_hole_points(players: Sequence[str], holes: Sequence[Mapping[str, Any]]) -> list[PlayerScore | None]:
    hole_points: list[PlayerScore | None] = []
    for number, hole in enumerate(holes, start=1):
        points = hole_wolf_points(players, hole)
        if points is None:
            logger.debug("Hole %d skipped for wolf points", number)
        hole_points.append(points)
    return hole_points


def _sum_hole_points(players: Sequence[str], hole_points: Sequence[PlayerScore | None]) -> PlayerScore:
    wolf_scores = {player: 0 for player in players}
    for points in hole_points:
        if points is None:
            continue
        for player, awarded in points.items():
            wolf_scores[player] += awarded
    return wolf_scores


def calculate_wolf_scores(players: Sequence[str], holes: Sequence[Mapping[str, Any]]) -> PlayerScore:
    return _sum_hole_points(players, calculate_hole_points(players, holes))


def adjust_wolf_scores(players: Sequence[str], wolf_scores: Mapping[str, int]) -> PlayerScore:
    if not players:
        raise ValueError("Cannot adjust wolf scores without players")
    min_wolf = min(wolf_scores[player] for player in players)
    return {player: wolf_scores[player] - min_wolf for player in players}


def get_medals(players: Sequence[str], scores: Mapping[str, int]) -> PlayerMedal:
    """Dense ranking over distinct scores, highest first; only three medal slots exist."""
    sorted_players = sorted(players, key=lambda player: scores[player], reverse=True)
    medals: PlayerMedal = {}
    current_rank = 0
    previous_score: int | None = None
    medal_index = 0

    for player in sorted_players:
        score = scores[player]
        if previous_score is None or score < previous_score:
            current_rank += 1
            medal_index = current_rank - 1
        medals[player] = MEDALS[medal_index] if medal_index < len(MEDALS) else Medal.none
        previous_score = score

    return medals


def complete_hole_numbers(players: Sequence[str], holes: Sequence[Mapping[str, Any]]) -> list[int]:
    return [
        number
        for number, hole in enumerate(holes, start=1)
        if all(value is not None for _, value in _hole_values(players, hole))
    ]


def score_round(players: Sequence[str], holes: Sequence[Mapping[str, Any]]) -> RoundScores:
    """Hole records -> every derived score. Recomputed from scratch on each call."""
    hole_points = calculate_hole_points(players, holes)
    wolf_scores = _sum_hole_points(players, hole_points)
    adjusted = adjust_wolf_scores(players, wolf_scores)
    return RoundScores(
        total_scores=calculate_total_scores(players, holes),
        wolf_scores=wolf_scores,
        adjusted_wolf_scores=adjusted,
        medals=get_medals(players, adjusted),
        hole_points=hole_points,
        complete_holes=complete_hole_numbers(players, holes),
    )
