"""Terminal client: play games locally, list stored games, replay them."""
import argparse
import logging
from typing import Callable, List, Optional, Tuple

import httpx

from minelog.board import Board, random_mine_locations
from minelog.client import MinelogClient
from minelog.errors import IllegalMove, MinelogError
from minelog.replay import ReplayEngine
from minelog.session import GameSession
from minelog.settings import Settings
from minelog.types import CellState, GameDetails, GameRecord, GameStatus, NewGame

logger = logging.getLogger(__name__)

Reader = Callable[[str], str]
Writer = Callable[[str], None]

PROMPT = "\nMove (row col, f row col to flag, q to quit): "


def render_board(session: GameSession) -> str:
    """Render the visible board with row and column labels."""
    board = session.board

    def cell_str(row: int, col: int) -> str:
        state = session.cell_state(row, col)
        if state is CellState.FLAGGED:
            return "F"
        if state is CellState.HIDDEN:
            return "."
        index = board.index(row, col)
        if index == session.exploded:
            return "X"
        if board.is_mine(index):
            return "*"
        count = board.adjacent_mine_count(row, col)
        return str(count) if count else " "

    out = ["   " + " ".join(f"{col:2d}" for col in range(board.width))]
    out.append("   " + "-" * (3 * board.width - 1))
    for row in range(board.height):
        out.append(f"{row:2d} |" + " ".join(f" {cell_str(row, col)}" for col in range(board.width)))
    return "\n".join(out)


def _read_or_quit(read: Reader, prompt: str) -> str:
    """Read one normalized line. End of input counts as quit."""
    try:
        return read(prompt).strip().lower()
    except EOFError:
        return "q"


def play(client: MinelogClient, session: GameSession, game_id: int,
         read: Reader = input, write: Writer = print) -> GameStatus:
    """Interactive loop. Every successful reveal is sent to the server."""
    write(render_board(session))

    while not session.is_terminal:
        parts = _read_or_quit(read, PROMPT).replace(",", " ").split()
        if parts and parts[0] in {"q", "quit", "exit"}:
            write("Quit.")
            break

        flag = bool(parts) and parts[0] == "f"
        if flag or (parts and parts[0] == "r"):
            parts = parts[1:]
        try:
            row, col = (int(p) for p in parts)
        except ValueError:
            write("Invalid input. Example: 3 5")
            continue

        if flag:
            if not session.toggle_flag(row, col):
                write("Cannot flag that cell.")
            write(render_board(session))
            continue

        try:
            result = session.require_reveal(row, col)
        except IllegalMove as error:
            write(str(error))
            continue

        client.record_move(game_id, result.move)
        write(render_board(session))

    if session.status is GameStatus.WON:
        write("\nYou revealed all safe cells. You won!")
    elif session.status is GameStatus.LOST:
        write("\nYou hit a mine. You lost.")
    return session.status


def replay(details: GameDetails, read: Reader = input, write: Writer = print,
           auto: bool = False) -> GameStatus:
    """Step through a stored game one recorded move at a time."""
    game = details.game
    engine = ReplayEngine.from_details(details)
    write(f"Replay of game {game.id} by {game.player_name} ({len(engine.moves)} moves)")
    write(render_board(engine.session))

    while not engine.is_finished():
        if not auto and _read_or_quit(read, "\nEnter for the next move, q to stop: ") == "q":
            write("Replay stopped.")
            return engine.status
        delta = engine.advance()
        move = delta.move
        write(f"\nStep {move.step_number}: ({move.row}, {move.col}) -> {move.outcome.value}")
        write(render_board(engine.session))

    write(f"\n{engine.final_message()}")
    return engine.status


def format_games(games: List[GameRecord]) -> str:
    lines = [f"{'id':>4}  {'date':19}  {'player':16} {'size':>7} {'mines':>5}  status"]
    for game in games:
        lines.append(
            f"{game.id:>4}  {game.date:19}  {game.player_name[:16]:16} "
            f"{f'{game.width}x{game.height}':>7} {game.mines_count:>5}  {game.status.label}"
        )
    return "\n".join(lines)


def new_game(client: MinelogClient, player_name: str, width: int, height: int,
             mines_count: int) -> Tuple[int, GameSession]:
    """Place mines locally, register the game and return (game_id, session)."""
    if mines_count >= width * height:
        raise MinelogError("Too many mines for the board size")
    locations = random_mine_locations(width, height, mines_count)
    game_id = client.create_game(NewGame(
        player_name=player_name,
        width=width,
        height=height,
        mines_count=mines_count,
        mine_locations=locations,
    ))
    logger.info(f"Started game {game_id}")
    return game_id, GameSession(Board.from_locations(width, height, locations))


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="minelog", description="Minesweeper with recorded replays")
    parser.add_argument("--server", default=settings.server_url, help="minelog server URL")
    sub = parser.add_subparsers(dest="command", required=True)

    play_parser = sub.add_parser("play", help="play a new game")
    play_parser.add_argument("--name", required=True, help="player name")
    play_parser.add_argument("--size", type=int, default=9, help="board width and height")
    play_parser.add_argument("--width", type=int, help="board width (overrides --size)")
    play_parser.add_argument("--height", type=int, help="board height (overrides --size)")
    play_parser.add_argument("--mines", type=int, default=10, help="number of mines")

    sub.add_parser("games", help="list stored games")

    replay_parser = sub.add_parser("replay", help="replay a stored game")
    replay_parser.add_argument("game_id", type=int)
    replay_parser.add_argument("--auto", action="store_true", help="play all steps without pausing")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    args = build_parser(settings).parse_args(argv)

    with MinelogClient(args.server) as client:
        try:
            if args.command == "play":
                width = args.width or args.size
                height = args.height or args.size
                game_id, session = new_game(client, args.name, width, height, args.mines)
                play(client, session, game_id)
            elif args.command == "games":
                print(format_games(client.list_games()))
            elif args.command == "replay":
                replay(client.get_game(args.game_id), auto=args.auto)
        except MinelogError as error:
            print(f"Error: {error}")
            return 1
        except httpx.HTTPError as error:
            logger.error(f"Server request failed: {error}")
            return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
