from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from threading import Lock
from uuid import UUID, uuid4

from app.schemas import HoleRecord, UnenteredResult

logger = logging.getLogger(__name__)


@dataclass
class StoredGame:
    id: UUID
    created_at: datetime
    updated_at: datetime
    expires_at: datetime
    players: list[str]
    holes: int
    scores: list[HoleRecord] = field(default_factory=list)
    current_hole: int = 1
    in_progress: bool = True


class GameNotFoundError(KeyError):
    pass


class GameFinishedError(ValueError):
    pass


class InMemoryRepository:
    def __init__(self, ttl_hours: int = 720) -> None:
        self._ttl_hours = ttl_hours
        self._items: dict[UUID, StoredGame] = {}
        self._lock = Lock()

    def _utcnow(self) -> datetime:
        return datetime.now(timezone.utc)

    def _prune(self) -> None:
        now = self._utcnow()
        expired = [item_id for item_id, item in self._items.items() if item.expires_at <= now]
        for item_id in expired:
            logger.info("Game %s expired", item_id)
            del self._items[item_id]

    def _touch(self, item: StoredGame) -> None:
        item.updated_at = self._utcnow()
        item.expires_at = item.updated_at + timedelta(hours=self._ttl_hours)

    def _snapshot(self, item: StoredGame) -> StoredGame:
        return replace(item, players=list(item.players), scores=[dict(hole) for hole in item.scores])

    def _require(self, item_id: UUID) -> StoredGame:
        item = self._items.get(item_id)
        if item is None:
            raise GameNotFoundError(str(item_id))
        return item

    def create(self, players: list[str], holes: int) -> StoredGame:
        with self._lock:
            self._prune()
            now = self._utcnow()
            item = StoredGame(
                id=uuid4(),
                created_at=now,
                updated_at=now,
                expires_at=now + timedelta(hours=self._ttl_hours),
                players=list(players),
                holes=holes,
                scores=[{player: UnenteredResult() for player in players} for _ in range(holes)],
            )
            self._items[item.id] = item
            return self._snapshot(item)

    def get(self, item_id: UUID) -> StoredGame | None:
        with self._lock:
            self._prune()
            item = self._items.get(item_id)
            return self._snapshot(item) if item else None

    def list_games(self, in_progress: bool | None = None) -> list[StoredGame]:
        with self._lock:
            self._prune()
            items = [
                self._snapshot(item)
                for item in self._items.values()
                if in_progress is None or item.in_progress == in_progress
            ]
        return sorted(items, key=lambda item: item.created_at, reverse=True)

    def latest_in_progress(self) -> StoredGame | None:
        with self._lock:
            self._prune()
            active = [self._snapshot(item) for item in self._items.values() if item.in_progress]
        return max(active, key=lambda item: item.updated_at, default=None)

    def update_hole(self, item_id: UUID, hole_number: int, results: HoleRecord) -> StoredGame:
        with self._lock:
            self._prune()
            item = self._require(item_id)
            if not item.in_progress:
                raise GameFinishedError(str(item_id))
            item.scores[hole_number - 1].update(results)
            item.current_hole = hole_number
            self._touch(item)
            return self._snapshot(item)

    def set_current_hole(self, item_id: UUID, hole_number: int) -> StoredGame:
        with self._lock:
            self._prune()
            item = self._require(item_id)
            if not item.in_progress:
                raise GameFinishedError(str(item_id))
            item.current_hole = hole_number
            self._touch(item)
            return self._snapshot(item)

    def finish(self, item_id: UUID) -> StoredGame:
        with self._lock:
            self._prune()
            item = self._require(item_id)
            item.in_progress = False
            self._touch(item)
            return self._snapshot(item)

    def delete(self, item_id: UUID) -> None:
        with self._lock:
            self._prune()
            self._require(item_id)
            del self._items[item_id]
