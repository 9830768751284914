from __future__ import annotations

import logging
from uuid import UUID

from fastapi import FastAPI, HTTPException

from app.config import settings
from app.gcs_history_store import GCSHistoryStore
from app.repository import GameFinishedError, GameNotFoundError, InMemoryRepository, StoredGame
from app.schemas import (
    CurrentHoleRequest,
    GameArchiveResponse,
    GameCreateRequest,
    GameListResponse,
    GameResponse,
    GameSummary,
    HoleUpdateRequest,
    ScoreRequest,
    ScoreResponse,
)
from app.validators import validate_hole_number, validate_hole_record, validate_players, validate_score_request
from app.wolf_scoring import score_round

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app = FastAPI(title="Wolf Golf Score API", version="0.1.0")
repo = InMemoryRepository(ttl_hours=settings.game_ttl_hours)
gcs_history_store = GCSHistoryStore()


def _game_response(game: StoredGame) -> GameResponse:
    return GameResponse(
        game_id=game.id,
        created_at=game.created_at,
        updated_at=game.updated_at,
        expires_at=game.expires_at,
        players=game.players,
        holes=game.holes,
        current_hole=game.current_hole,
        in_progress=game.in_progress,
        scores=game.scores,
        result=score_round(game.players, game.scores),
    )


def _get_game_or_404(game_id: UUID) -> StoredGame:
    game = repo.get(game_id)
    if not game:
        raise HTTPException(status_code=404, detail="game not found or expired")
    return game


@app.get("/")
def root() -> dict[str, str]:
    return {
        "message": "Wolf Golf Score API",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/api/v1/score", response_model=ScoreResponse)
def score(req: ScoreRequest) -> ScoreResponse:
    validate_score_request(req)
    result = score_round(req.players, req.holes)
    return ScoreResponse(status="ok", result=result)


@app.post("/api/v1/games", response_model=GameResponse)
def create_game(req: GameCreateRequest) -> GameResponse:
    validate_players(req.players)
    game = repo.create(req.players, req.holes or settings.default_holes)
    logger.info("Created game %s with %d players over %d holes", game.id, len(game.players), game.holes)
    return _game_response(game)


@app.get("/api/v1/games", response_model=GameListResponse)
def list_games(in_progress: bool | None = None) -> GameListResponse:
    summaries = []
    for game in repo.list_games(in_progress=in_progress):
        result = score_round(game.players, game.scores)
        summaries.append(
            GameSummary(
                game_id=game.id,
                created_at=game.created_at,
                players=game.players,
                holes=game.holes,
                current_hole=game.current_hole,
                in_progress=game.in_progress,
                total_scores=result.total_scores,
                adjusted_wolf_scores=result.adjusted_wolf_scores,
            )
        )
    return GameListResponse(games=summaries)


@app.get("/api/v1/games/current", response_model=GameResponse)
def current_game() -> GameResponse:
    game = repo.latest_in_progress()
    if not game:
        raise HTTPException(status_code=404, detail="no game in progress")
    return _game_response(game)


@app.get("/api/v1/games/{game_id}", response_model=GameResponse)
def get_game(game_id: UUID) -> GameResponse:
    return _game_response(_get_game_or_404(game_id))


@app.put("/api/v1/games/{game_id}/holes/{hole_number}", response_model=GameResponse)
def update_hole(game_id: UUID, hole_number: int, req: HoleUpdateRequest) -> GameResponse:
    game = _get_game_or_404(game_id)
    validate_hole_number(hole_number, game.holes)
    validate_hole_record(game.players, req.results, hole_number)
    try:
        game = repo.update_hole(game_id, hole_number, req.results)
    except GameNotFoundError as exc:
        raise HTTPException(status_code=404, detail="game not found or expired") from exc
    except GameFinishedError as exc:
        raise HTTPException(status_code=409, detail="game is already finished") from exc
    return _game_response(game)


@app.put("/api/v1/games/{game_id}/current-hole", response_model=GameResponse)
def move_to_hole(game_id: UUID, req: CurrentHoleRequest) -> GameResponse:
    game = _get_game_or_404(game_id)
    validate_hole_number(req.current_hole, game.holes)
    try:
        game = repo.set_current_hole(game_id, req.current_hole)
    except GameNotFoundError as exc:
        raise HTTPException(status_code=404, detail="game not found or expired") from exc
    except GameFinishedError as exc:
        raise HTTPException(status_code=409, detail="game is already finished") from exc
    return _game_response(game)


@app.post("/api/v1/games/{game_id}/finish", response_model=GameResponse)
def finish_game(game_id: UUID) -> GameResponse:
    try:
        game = repo.finish(game_id)
    except GameNotFoundError as exc:
        raise HTTPException(status_code=404, detail="game not found or expired") from exc
    logger.info("Finished game %s", game.id)
    return _game_response(game)


@app.delete("/api/v1/games/{game_id}")
def delete_game(game_id: UUID) -> dict[str, str]:
    try:
        repo.delete(game_id)
    except GameNotFoundError as exc:
        raise HTTPException(status_code=404, detail="game not found or expired") from exc
    logger.info("Deleted game %s", game_id)
    return {"status": "ok"}


@app.post("/api/v1/games/{game_id}/archive", response_model=GameArchiveResponse)
def archive_game(game_id: UUID) -> GameArchiveResponse:
    game = _get_game_or_404(game_id)
    if game.in_progress:
        raise HTTPException(status_code=409, detail="only finished games can be archived")
    try:
        storage_info = gcs_history_store.save(_game_response(game))
    except ValueError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    except Exception as exc:  # pragma: no cover
        logger.exception("Failed to archive game %s", game.id)
        raise HTTPException(status_code=500, detail=f"Failed to save game to GCS: {exc}") from exc
    return GameArchiveResponse(status="ok", storage=storage_info)
