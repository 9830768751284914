from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from google.cloud import storage

from app.config import settings
from app.schemas import GameResponse

logger = logging.getLogger(__name__)


def build_archive_record(game: GameResponse, archived_at: datetime) -> dict:
    """Finished game -> archive document: final standings up front, hole-by-hole detail after."""
    result = game.result
    return {
        "game_id": str(game.game_id),
        "played_at": game.created_at.isoformat(),
        "archived_at": archived_at.isoformat(),
        "players": game.players,
        "holes": game.holes,
        "standings": [
            {
                "player": player,
                "strokes": result.total_scores[player],
                "wolf": result.adjusted_wolf_scores[player],
                "medal": result.medals[player].value,
            }
            for player in sorted(game.players, key=lambda p: result.adjusted_wolf_scores[p], reverse=True)
        ],
        "scorecard": [
            {
                "hole": number,
                "results": {player: hole_result.model_dump(mode="json") for player, hole_result in record.items()},
                "wolf_points": points,
            }
            for number, (record, points) in enumerate(zip(game.scores, result.hole_points), start=1)
        ],
    }


class GCSHistoryStore:
    def __init__(
        self,
        bucket_name: str | None = None,
        prefix: str | None = None,
        client: storage.Client | None = None,
    ) -> None:
        self.bucket_name = bucket_name or settings.gcs_bucket_name
        self.prefix = (prefix or settings.gcs_history_prefix).strip("/")
        self._client = client

    def _get_client(self) -> storage.Client:
        if self._client is None:
            self._client = storage.Client()
        return self._client

    def save(self, game: GameResponse) -> dict:
        if not self.bucket_name:
            raise ValueError("GCS bucket is not configured")

        record = build_archive_record(game, datetime.now(timezone.utc))
        object_name = f"{self.prefix}/{game.created_at.strftime('%Y/%m')}/{game.game_id}.json"

        bucket = self._get_client().bucket(self.bucket_name)
        blob = bucket.blob(object_name)
        blob.upload_from_string(json.dumps(record, ensure_ascii=False), content_type="application/json")
        logger.info("Archived game %s to gs://%s/%s", game.game_id, self.bucket_name, object_name)
        return {"bucket": self.bucket_name, "object_name": object_name}
