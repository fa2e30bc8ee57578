"""
Chess rules engine package.

This package implements the rules of chess over an explicit, mutable
GameState and a fixed-depth minimax search with alpha-beta pruning for the
AI opponent. It keeps no session state of its own: every function takes the
game it works on as an argument.

Modules:
    board     — Pieces, the 8x8 board, castling rights, GameState, new_game()
    constants — Piece values, piece-square tables, search and draw parameters
    movegen   — Per-piece move rules, attack detection, legal_moves()
    execute   — make_move() / undo_move() and the validating apply_move()
    status    — Check, checkmate, stalemate, draw rules, check_game_end()
    evaluate  — Static evaluation (material + piece-square tables)
    search    — Minimax with alpha-beta, best_move(), perft()
    notation  — Square names, FEN and UCI text via python-chess
"""
