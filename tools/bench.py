#!/usr/bin/env python3
"""
Search and move-generator benchmark.

Two tables:

1. Fixed-depth search over a handful of positions, played through the UCI
   front end in a child process, with node counts and timing read back from
   its "info" line.
2. perft leaf counts for positions with published totals, so a generator
   change that breaks a rule shows up as MISMATCH.

Usage: python3 tools/bench.py [depth]
"""
import os
import subprocess
import sys
import time

REPO = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO not in sys.path:
    sys.path.insert(0, REPO)

from chesscore.board import new_game
from chesscore.constants import DEFAULT_DEPTH
from chesscore.notation import state_from_fen
from chesscore.search import perft

PYTHON = sys.executable
UCI_SCRIPT = os.path.join(REPO, "interface", "uci.py")

# (label, argument of the UCI "position" command)
SEARCH_POSITIONS = [
    ("Start",        "startpos"),
    ("After 1.e4",   "startpos moves e2e4"),
    ("Italian",      "startpos moves e2e4 e7e5 g1f3 b8c6 f1c4"),
    ("Two knights",  "fen r1bqkb1r/pppp1ppp/2n2n2/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4"),
    ("Pawn ending",  "fen 8/5pk1/6p1/7p/7P/6P1/5PK1/8 w - - 0 1"),
    ("Back rank",    "fen 6k1/5ppp/8/8/8/8/5PPP/3R2K1 w - - 0 1"),
]

# (label, FEN or None for the start position, depth, published leaf count)
PERFT_POSITIONS = [
    ("Start",     None, 3, 8_902),
    ("Kiwipete",  "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1", 2, 2_039),
    ("Endgame",   "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1", 3, 2_812),
]

SEARCH_FIELDS = ("depth", "cp", "nodes", "nps", "time")


def _parse_info(line: str) -> dict[str, int]:
    """Pull the integer fields out of an "info depth ..." line."""
    tokens = line.split()
    values = {}
    for key in SEARCH_FIELDS:
        if key in tokens:
            try:
                values[key] = int(tokens[tokens.index(key) + 1])
            except (ValueError, IndexError):
                pass
    return values


def search_position(position: str, depth: int) -> tuple[str, dict[str, int]]:
    """
    Search one position in a fresh UCI process.

    Returns the bestmove text and whatever numeric info fields the engine
    reported before it.
    """
    commands = f"uci\nisready\nposition {position}\ngo depth {depth}\nquit\n"
    completed = subprocess.run(
        [PYTHON, UCI_SCRIPT],
        input=commands,
        capture_output=True,
        text=True,
        env={**os.environ, "PYTHONPATH": REPO},
        timeout=600,
    )
    info: dict[str, int] = {}
    best = "(none)"
    for line in completed.stdout.splitlines():
        if line.startswith("info depth"):
            info = _parse_info(line)
        elif line.startswith("bestmove"):
            best = line.split()[1]
    return best, info


def run_search(depth: int) -> None:
    print(f"Search at depth {depth} via {UCI_SCRIPT}")
    header = f"{'Position':<14} {'Move':<7} {'Score':>7} {'Nodes':>9} {'NPS':>8} {'Time(ms)':>9}"
    print(header)
    print("-" * len(header))
    total_nodes = total_ms = 0
    for label, position in SEARCH_POSITIONS:
        best, info = search_position(position, depth)
        nodes, ms = info.get("nodes", 0), info.get("time", 0)
        total_nodes += nodes
        total_ms += ms
        print(
            f"{label:<14} {best:<7} {info.get('cp', 0):>7} {nodes:>9,} "
            f"{info.get('nps', 0):>8,} {ms:>9,}"
        )
    print("-" * len(header))
    print(f"{'TOTAL':<14} {'':<7} {'':>7} {total_nodes:>9,} {'':>8} {total_ms:>9,}")


def run_perft() -> None:
    header = f"{'Position':<14} {'Depth':>5} {'Leaves':>8} {'Expected':>9} {'Time(ms)':>9}"
    print(header)
    print("-" * len(header))
    for label, fen, depth, expected in PERFT_POSITIONS:
        state = new_game() if fen is None else state_from_fen(fen)
        start = time.monotonic()
        leaves = perft(state, depth)
        elapsed_ms = int((time.monotonic() - start) * 1000)
        flag = "" if leaves == expected else "  MISMATCH"
        print(f"{label:<14} {depth:>5} {leaves:>8,} {expected:>9,} {elapsed_ms:>9,}{flag}")


def main() -> None:
    depth = int(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_DEPTH
    run_search(depth)
    print()
    run_perft()


if __name__ == "__main__":
    main()
