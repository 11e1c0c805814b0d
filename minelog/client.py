"""HTTP client for the minelog server."""
import logging
from typing import Any, List, Optional

import httpx

from minelog.errors import GameNotFound, InvalidInput
from minelog.types import GameDetails, GameRecord, Move, NewGame

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get('error'):
        return str(payload['error'])
    return response.text.strip() or 'Invalid request'


class MinelogClient:
    """Thin wrapper over the server's JSON API."""

    def __init__(self, base_url: str, timeout: float = 10.0,
                 transport: Optional[httpx.BaseTransport] = None):
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> 'MinelogClient':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, game_id: Optional[int] = None, **kwargs) -> Any:
        response = self._http.request(method, path, **kwargs)
        if response.status_code == 404 and game_id is not None:
            raise GameNotFound(game_id)
        if response.status_code == 400:
            raise InvalidInput(_error_message(response))
        response.raise_for_status()
        return response.json()

    def create_game(self, new_game: NewGame) -> int:
        payload = self._request('POST', '/api/games', json=new_game.to_dict())
        return int(payload['id'])

    def record_move(self, game_id: int, move: Move) -> None:
        self._request('POST', f'/api/games/{game_id}/moves', game_id=game_id, json=move.to_dict())
        logger.debug(f"Recorded step {move.step_number} of game {game_id}")

    def get_game(self, game_id: int) -> GameDetails:
        return GameDetails.from_dict(self._request('GET', f'/api/games/{game_id}', game_id=game_id))

    def list_games(self) -> List[GameRecord]:
        return [GameRecord.from_dict(item) for item in self._request('GET', '/api/games')]
