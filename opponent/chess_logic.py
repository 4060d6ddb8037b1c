"""Rules-engine adapter over ``python-chess``.

The opponent never talks to :class:`chess.Board` legality or status methods
directly; everything goes through these helpers so the presentation layer and
the controller agree on what counts as a legal move, a finished game and a
move description.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import chess

from .errors import IllegalMoveError


@dataclass(frozen=True)
class MoveRecord:
    """A legal move together with the attributes the heuristics look at."""

    move: chess.Move
    piece_type: chess.PieceType
    captured: Optional[chess.PieceType]
    is_castling: bool
    san: str

    @property
    def from_square(self) -> chess.Square:
        return self.move.from_square

    @property
    def to_square(self) -> chess.Square:
        return self.move.to_square

    @property
    def promotion(self) -> Optional[chess.PieceType]:
        return self.move.promotion

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    def uci(self) -> str:
        return self.move.uci()


def describe_move(board: chess.Board, move: chess.Move) -> MoveRecord:
    """Build a :class:`MoveRecord` for ``move`` before it is played on ``board``."""
    piece = board.piece_at(move.from_square)
    if piece is None:
        raise IllegalMoveError(move, board.fen())

    if board.is_en_passant(move):
        captured: Optional[chess.PieceType] = chess.PAWN
    elif board.is_castling(move):
        # python-chess encodes Chess960-style castling as king-takes-rook
        captured = None
    else:
        captured = board.piece_type_at(move.to_square)

    return MoveRecord(
        move=move,
        piece_type=piece.piece_type,
        captured=captured,
        is_castling=board.is_castling(move),
        san=board.san(move),
    )


def is_valid_move(board: chess.Board, move: chess.Move) -> bool:
    return move in board.legal_moves

def is_game_over(board: chess.Board) -> bool:
    return board.is_game_over()

def is_in_check(board: chess.Board) -> bool:
    return board.is_check()

def is_checkmate(board: chess.Board) -> bool:
    return board.is_checkmate()

def is_stalemate(board: chess.Board) -> bool:
    return board.is_stalemate()

def is_draw(board: chess.Board) -> bool:
    """Drawn by stalemate, bare material, the fifty-move rule or threefold repetition."""
    return (
        board.is_stalemate()
        or board.is_insufficient_material()
        or board.is_fifty_moves()
        or board.is_repetition(3)
    )

def side_to_move(board: chess.Board) -> chess.Color:
    return board.turn

def get_game_result(board: chess.Board) -> str:
    if board.is_checkmate():
        return "Checkmate"
    elif board.is_stalemate():
        return "Stalemate"
    elif board.is_insufficient_material():
        return "Insufficient Material"
    elif board.is_seventyfive_moves():
        return "75-move rule"
    elif board.is_fivefold_repetition():
        return "Fivefold Repetition"
    elif board.is_fifty_moves():
        return "50-move rule"
    elif board.is_repetition(3):
        return "Threefold Repetition"
    else:
        return "Game in progress"


def get_possible_moves(board: chess.Board, square: Optional[chess.Square] = None) -> List[MoveRecord]:
    """Legal moves in generation order, optionally only those leaving ``square``."""
    return [
        describe_move(board, move)
        for move in board.legal_moves
        if square is None or move.from_square == square
    ]


def candidate_moves(board: chess.Board) -> List[MoveRecord]:
    """Legal moves the opponent may choose from; promotions always make a queen."""
    return [
        describe_move(board, move)
        for move in board.legal_moves
        if move.promotion in (None, chess.QUEEN)
    ]


def make_move(board: chess.Board, move: chess.Move) -> MoveRecord:
    """Play ``move`` on ``board`` or raise :class:`IllegalMoveError`."""
    if not is_valid_move(board, move):
        raise IllegalMoveError(move, board.fen())
    record = describe_move(board, move)
    board.push(move)
    return record

def undo_move(board: chess.Board) -> bool:
    if board.move_stack:
        board.pop()
        return True
    return False


def export_board_fen(board: chess.Board) -> str:
    return board.fen()


def export_move_history_san(board: chess.Board) -> str:
    moves_san = []
    temp_board = board.root()

    for move in board.move_stack:
        moves_san.append(temp_board.san(move))
        temp_board.push(move)

    return ' '.join(moves_san)
