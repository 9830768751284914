from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

CUSTOM_PREFIX = "Custom:"
# Leading signed digits only: "3.5" -> 3, "1_0" -> 1, "abc" -> unentered.
CUSTOM_VALUE_RE = re.compile(r"\s*([+-]?\d+)")


class ScoreLabel(str, Enum):
    eagle = "Eagle"
    birdie = "Birdie"
    par = "Par"
    bogey = "Bogey"
    double = "Double"


class Medal(str, Enum):
    first = "1st"
    second = "2nd"
    third = "3rd"
    none = "none"


PlayerName = str


class LabelResult(BaseModel):
    kind: Literal["label"] = "label"
    label: ScoreLabel


class CustomResult(BaseModel):
    kind: Literal["custom"] = "custom"
    value: int


class UnenteredResult(BaseModel):
    kind: Literal["unentered"] = "unentered"


def _parse_custom(text: str) -> dict:
    match = CUSTOM_VALUE_RE.match(text)
    if not match:
        return {"kind": "unentered"}
    return {"kind": "custom", "value": int(match.group(1))}


def _coerce_hole_result(value: Any) -> Any:
    """Accept bare integers and the legacy string encoding ("Birdie", "Custom:3", "") alongside tagged objects."""
    if value is None:
        return {"kind": "unentered"}
    if isinstance(value, ScoreLabel):
        return {"kind": "label", "label": value}
    if isinstance(value, int) and not isinstance(value, bool):
        return {"kind": "custom", "value": value}
    if not isinstance(value, str):
        return value
    text = value.strip()
    if text in {label.value for label in ScoreLabel}:
        return {"kind": "label", "label": text}
    if text.startswith(CUSTOM_PREFIX):
        return _parse_custom(text[len(CUSTOM_PREFIX):])
    return {"kind": "unentered"}


HoleResult = Annotated[
    Union[LabelResult, CustomResult, UnenteredResult],
    Field(discriminator="kind"),
    BeforeValidator(_coerce_hole_result),
]

HoleRecord = dict[PlayerName, HoleResult]
PlayerScore = dict[PlayerName, int]
PlayerMedal = dict[PlayerName, Medal]


class RoundScores(BaseModel):
    total_scores: PlayerScore
    wolf_scores: PlayerScore
    adjusted_wolf_scores: PlayerScore
    medals: PlayerMedal
    hole_points: list[PlayerScore | None] = Field(default_factory=list)
    complete_holes: list[int] = Field(default_factory=list)


class ScoreRequest(BaseModel):
    players: list[PlayerName]
    holes: list[HoleRecord]


class ScoreResponse(BaseModel):
    status: Literal["ok"]
    result: RoundScores


class GameCreateRequest(BaseModel):
    players: list[PlayerName]
    holes: int | None = Field(default=None, ge=1)

    model_config = ConfigDict(extra="forbid")


class HoleUpdateRequest(BaseModel):
    results: HoleRecord


class CurrentHoleRequest(BaseModel):
    current_hole: int = Field(ge=1)


class GameResponse(BaseModel):
    game_id: UUID
    created_at: datetime
    updated_at: datetime
    expires_at: datetime
    players: list[PlayerName]
    holes: int
    current_hole: int
    in_progress: bool
    scores: list[HoleRecord]
    result: RoundScores


class GameSummary(BaseModel):
    game_id: UUID
    created_at: datetime
    players: list[PlayerName]
    holes: int
    current_hole: int
    in_progress: bool
    total_scores: PlayerScore
    adjusted_wolf_scores: PlayerScore


class GameListResponse(BaseModel):
    games: list[GameSummary] = Field(default_factory=list)


class GameArchiveResponse(BaseModel):
    status: Literal["ok"]
    storage: dict
