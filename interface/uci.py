"""
UCI (Universal Chess Interface) protocol handler.

UCI is the standard text-based protocol that lets chess GUIs and testing
tools (cutechess-cli, the bench script in tools/) talk to an engine. The
engine reads commands from stdin and writes responses to stdout. Every output
line is flushed immediately; GUIs read line by line.

Protocol overview:
    GUI → Engine: uci, isready, ucinewgame, position, go, stop, quit, setoption
    Engine → GUI: id name, id author, option, uciok, readyok, info, bestmove

Search depth:
    The engine searches to a fixed depth. "go depth N" overrides it for one
    search; "setoption name Depth value N" changes the default. Time-control
    parameters (wtime, movetime, ...) are accepted and ignored.

Threading model:
    The UCI loop runs on the main thread. "go" starts the search in a daemon
    thread so the loop keeps reading stdin. The search cannot be interrupted,
    so "stop" waits for it to finish and emit its bestmove.

Critical rule: NEVER print to stdout except for valid UCI responses.
Debug output goes to stderr.
"""

import os
import sys
import threading
import time

# ---------------------------------------------------------------------------
# Path setup: make 'chesscore' importable when this script is run directly
# as `python interface/uci.py` from a source checkout.
# ---------------------------------------------------------------------------
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

from chesscore.board import GameState, new_game
from chesscore.constants import DEFAULT_DEPTH, MAX_DEPTH
from chesscore.execute import IllegalMoveError, apply_move
from chesscore.notation import move_to_uci, parse_uci_move, state_from_fen
from chesscore.search import search


def _send(line: str) -> None:
    """Write one UCI response line to stdout and flush immediately."""
    print(line, flush=True)


def _log(message: str) -> None:
    """Write a diagnostic line to stderr; stdout is reserved for the protocol."""
    print(message, file=sys.stderr, flush=True)


class UciHandler:
    """
    Stateful handler for the UCI protocol.

    Attributes:
        state:         The current game, rebuilt by every "position" command.
        depth:         Default search depth, changed with setoption.
        search_thread: The active search thread, or None.
    """

    def __init__(self) -> None:
        self.state: GameState = new_game()
        self.depth: int = DEFAULT_DEPTH
        self.search_thread: threading.Thread | None = None

    # -----------------------------------------------------------------------
    # Command handlers
    # -----------------------------------------------------------------------

    def handle_uci(self) -> None:
        """Identify the engine and list its options, then "uciok"."""
        _send("id name ChessCore")
        _send("id author ChessCore Project")
        _send(f"option name Depth type spin default {DEFAULT_DEPTH} min 1 max {MAX_DEPTH}")
        _send("uciok")

    def handle_isready(self) -> None:
        """Synchronization barrier: answer once any running search is done."""
        self._wait_for_search()
        _send("readyok")

    def handle_ucinewgame(self) -> None:
        self._wait_for_search()
        self.state = new_game()

    def handle_setoption(self, tokens: list[str]) -> None:
        """
        Parse "setoption name <id> value <x>".

        Only Depth is recognised; the value is clamped to [1, MAX_DEPTH].
        """
        if "name" not in tokens or "value" not in tokens:
            _log(f"uci: malformed setoption: {' '.join(tokens)}")
            return
        name = " ".join(tokens[tokens.index("name") + 1:tokens.index("value")])
        value = " ".join(tokens[tokens.index("value") + 1:])
        if name.lower() != "depth":
            _log(f"uci: unknown option: {name!r}")
            return
        try:
            self.depth = max(1, min(int(value), MAX_DEPTH))
        except ValueError:
            _log(f"uci: invalid Depth value: {value!r}")

    def handle_position(self, tokens: list[str]) -> None:
        """
        Parse and apply a "position" command.

        Command formats:
            position startpos
            position startpos moves e2e4 e7e5 ...
            position fen <FEN>
            position fen <FEN> moves e2e4 e7e5 ...

        Moves are replayed through the validating apply_move(), so the
        history, repetition record and counters match a game played move
        by move. Replay stops at the first illegal move.

        Args:
            tokens: The command tokens with "position" already stripped.
        """
        if not tokens:
            return
        self._wait_for_search()

        try:
            if tokens[0] == "startpos":
                state = new_game()
                move_tokens = tokens[2:] if len(tokens) > 1 and tokens[1] == "moves" else []
            elif tokens[0] == "fen":
                # FEN strings have 6 space-separated fields; find where "moves" appears
                if "moves" in tokens:
                    moves_idx = tokens.index("moves")
                    fen = " ".join(tokens[1:moves_idx])
                    move_tokens = tokens[moves_idx + 1:]
                else:
                    fen = " ".join(tokens[1:])
                    move_tokens = []
                state = state_from_fen(fen)
            else:
                _log(f"uci: unknown position type: {tokens[0]}")
                return
        except ValueError as e:
            _log(f"uci: error in position command: {e}")
            return

        for uci_move in move_tokens:
            try:
                from_square, to_square, promotion = parse_uci_move(uci_move)
                result = apply_move(state, from_square, to_square, promotion)
            except (IllegalMoveError, ValueError) as e:
                _log(f"uci: illegal move in position command: {uci_move} ({e})")
                break
            if result.is_promotion_pending:
                _log(f"uci: promotion piece missing in position command: {uci_move}")
                break

        self.state = state

    def handle_go(self, tokens: list[str]) -> None:
        """
        Start a search of the current position in a background thread.

        The searching side is the side to move, so the reported score is
        from the mover's point of view, as UCI expects.

        Args:
            tokens: The command tokens with "go" already stripped.
        """
        self._wait_for_search()
        depth = self._parse_go_depth(tokens)

        # The search clones internally, but the next "position" command
        # replaces self.state; bind the current one for the worker.
        state = self.state

        def search_and_reply() -> None:
            """Run the search and emit the UCI info + bestmove lines."""
            try:
                start = time.monotonic()
                result = search(state, state.side_to_move, depth)
                elapsed_ms = max(1, int((time.monotonic() - start) * 1000))

                if result.move is not None:
                    nps = max(1, result.nodes * 1000 // elapsed_ms)
                    _send(
                        f"info depth {result.depth} score cp {result.score} "
                        f"nodes {result.nodes} nps {nps} time {elapsed_ms}"
                    )
                    _send(f"bestmove {move_to_uci(result.move)}")
                else:
                    # No legal moves: checkmate or stalemate.
                    _send("bestmove (none)")

            except Exception as e:
                _log(f"search error: {e}")
                _send("bestmove (none)")

        self.search_thread = threading.Thread(target=search_and_reply, daemon=True)
        self.search_thread.start()

    def handle_stop(self) -> None:
        """The search runs to completion; wait for its bestmove."""
        self._wait_for_search()

    def handle_quit(self) -> None:
        self._wait_for_search()
        sys.exit(0)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _wait_for_search(self) -> None:
        if self.search_thread is not None and self.search_thread.is_alive():
            self.search_thread.join()
        self.search_thread = None

    def _parse_go_depth(self, tokens: list[str]) -> int:
        """
        Extract the search depth from "go" command tokens.

        "go depth N" wins, clamped to [1, MAX_DEPTH]; otherwise the configured
        default is used. Clock parameters are skipped without error.
        """
        if "depth" in tokens:
            idx = tokens.index("depth")
            try:
                return max(1, min(int(tokens[idx + 1]), MAX_DEPTH))
            except (ValueError, IndexError):
                _log(f"uci: invalid depth in go command: {' '.join(tokens)}")
        return self.depth


def run_uci_loop() -> None:
    """
    Main UCI protocol loop.

    Reads lines from stdin and dispatches each command to the UciHandler
    until "quit" or end of input. Each command is wrapped in a try/except so
    that a failure in one handler is logged to stderr and the loop continues.
    """
    handler = UciHandler()

    for raw_line in sys.stdin:
        line = raw_line.strip()
        if not line:
            continue

        tokens = line.split()
        command = tokens[0]
        args = tokens[1:]

        try:
            if command == "uci":
                handler.handle_uci()
            elif command == "isready":
                handler.handle_isready()
            elif command == "ucinewgame":
                handler.handle_ucinewgame()
            elif command == "setoption":
                handler.handle_setoption(args)
            elif command == "position":
                handler.handle_position(args)
            elif command == "go":
                handler.handle_go(args)
            elif command == "stop":
                handler.handle_stop()
            elif command == "quit":
                handler.handle_quit()
            else:
                # Unknown commands are ignored per the UCI specification.
                _log(f"uci: ignoring unknown command: {command!r}")

        except Exception as e:
            _log(f"uci: unhandled error for command {command!r}: {e}")

    handler._wait_for_search()


if __name__ == "__main__":
    run_uci_loop()
