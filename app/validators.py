from fastapi import HTTPException

from app.schemas import HoleRecord, ScoreRequest


def validate_players(players: list[str]) -> None:
    if not players:
        raise HTTPException(status_code=422, detail="At least one player is required")
    seen: set[str] = set()
    for player in players:
        if not player.strip():
            raise HTTPException(status_code=422, detail="Player names must not be blank")
        if player in seen:
            raise HTTPException(status_code=422, detail=f"Duplicate player name: {player}")
        seen.add(player)


def validate_hole_record(players: list[str], record: HoleRecord, hole_number: int) -> None:
    unknown = [name for name in record if name not in players]
    if unknown:
        raise HTTPException(
            status_code=422,
            detail=f"Hole {hole_number} has results for unknown players: {', '.join(unknown)}",
        )


def validate_hole_number(hole_number: int, holes: int) -> None:
    if not 1 <= hole_number <= holes:
        raise HTTPException(status_code=422, detail=f"Hole number must be between 1 and {holes}")


def validate_score_request(req: ScoreRequest) -> None:
    validate_players(req.players)
    if not req.holes:
        raise HTTPException(status_code=422, detail="At least one hole record is required")
    for number, record in enumerate(req.holes, start=1):
        validate_hole_record(req.players, record, number)
