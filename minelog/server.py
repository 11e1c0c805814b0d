"""Flask server for recording and replaying minesweeper games."""
import asyncio
import logging
from datetime import datetime
from flask import Flask, request, jsonify
from flask_cors import CORS
from temporalio.client import Client
from temporalio.common import WorkflowIDConflictPolicy

from minelog.board import Board
from minelog.client_provider import get_temporal_client
from minelog.errors import GameNotFound, InvalidInput
from minelog.replay import ReplayEngine
from minelog.settings import Settings
from minelog.store import GameStore
from minelog.types import GameRecord, Move, MoveAck, NewGame
from minelog.workflows import GameRecorderWorkflow, workflow_id_for

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

settings = Settings.from_env()

# Global references, set up by main() or by tests
temporal_client: Client | None = None
store: GameStore | None = None


def error_response(message: str, status: int):
    return jsonify({'error': message}), status


def serialize_summary(game: GameRecord):
    """Game list entry without the mine layout."""
    payload = game.to_dict()
    del payload['mine_locations']
    payload['status_label'] = game.status.label
    return payload


async def submit_move(game_id: int, move: Move) -> MoveAck:
    """Route a move through the game's recording workflow, starting it if needed."""
    handle = await temporal_client.start_workflow(
        GameRecorderWorkflow.run,
        game_id,
        id=workflow_id_for(game_id),
        task_queue=settings.task_queue,
        id_conflict_policy=WorkflowIDConflictPolicy.USE_EXISTING,
    )
    return await handle.execute_update(GameRecorderWorkflow.record_move_update, move)


@app.route('/api/games', methods=['POST'])
def create_game():
    """Create a new game."""
    try:
        new_game = NewGame.from_payload(request.get_json(silent=True))
        game_id = store.create_game(
            new_game.width,
            new_game.height,
            new_game.mines_count,
            new_game.mine_locations,
            new_game.player_name,
        )
        return jsonify({'id': game_id})

    except InvalidInput as error:
        return error_response(str(error), 400)
    except Exception as error:
        logger.error(f"Error creating game: {error}")
        return error_response('Failed to create game', 500)


@app.route('/api/games', methods=['GET'])
def list_games():
    """List games, most recent first."""
    try:
        return jsonify([serialize_summary(game) for game in store.list_games()])
    except Exception as error:
        logger.error(f"Error listing games: {error}")
        return error_response('Failed to list games', 500)


@app.route('/api/games/<int:game_id>', methods=['GET'])
def get_game(game_id):
    """Get a game with its mine layout and ordered moves."""
    try:
        return jsonify(store.get_game_details(game_id).to_dict())

    except GameNotFound:
        return error_response('Game not found', 404)
    except Exception as error:
        logger.error(f"Error getting game {game_id}: {error}")
        return error_response('Failed to get game', 500)


@app.route('/api/games/<int:game_id>/moves', methods=['POST'])
def record_move(game_id):
    """Record a move as reported by the client."""
    try:
        move = Move.from_payload(request.get_json(silent=True))
        game = store.get_game(game_id)
        board = Board.from_locations(game.width, game.height, game.mine_locations)
        if not board.in_bounds(move.row, move.col):
            raise InvalidInput(f"Cell ({move.row}, {move.col}) is off the {game.width}x{game.height} board")

        ack = asyncio.run(submit_move(game_id, move))
        if not ack.outcome_matches:
            logger.warning(f"Game {game_id} step {move.step_number} stored with a disputed outcome")
        return jsonify({'status': 'ok', 'game_status': ack.status.value})

    except InvalidInput as error:
        return error_response(str(error), 400)
    except GameNotFound:
        return error_response('Game not found', 404)
    except Exception as error:
        logger.error(f"Error recording move for game {game_id}: {error}")
        return error_response('Failed to record move', 500)


@app.route('/api/games/<int:game_id>/replay', methods=['GET'])
def replay_game(game_id):
    """Replay a stored game and return every step."""
    try:
        details = store.get_game_details(game_id)
        engine = ReplayEngine.from_details(details)
        steps = engine.run()
        if engine.status != details.game.status:
            logger.warning(
                f"Replay of game {game_id} ends {engine.status.value}, "
                f"stored status is {details.game.status.value}"
            )
        return jsonify({
            'id': game_id,
            'width': details.game.width,
            'height': details.game.height,
            'steps': [step.to_dict() for step in steps],
            'status': engine.status.value,
            'stored_status': details.game.status.value,
            'message': engine.final_message(),
        })

    except GameNotFound:
        return error_response('Game not found', 404)
    except Exception as error:
        logger.error(f"Error replaying game {game_id}: {error}")
        return error_response('Failed to replay game', 500)


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({
        'status': 'OK',
        'timestamp': datetime.now().isoformat()
    })


@app.errorhandler(404)
def not_found(error):
    return error_response('Not found', 404)


async def initialize_client():
    """Initialize Temporal client."""
    global temporal_client
    temporal_client = await get_temporal_client(settings)
    logger.info("Connected to Temporal server")


def main():
    """Start the Flask server."""
    global store
    logging.basicConfig(level=settings.log_level)
    try:
        store = GameStore(settings.db_path)
        asyncio.run(initialize_client())

        logger.info(f"Minelog server running on http://localhost:{settings.port}")
        logger.info("Make sure to start the Temporal worker in another terminal: python -m minelog.worker")

        app.run(host='0.0.0.0', port=settings.port, debug=False)

    except Exception as error:
        logger.error(f"Failed to start server: {error}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
