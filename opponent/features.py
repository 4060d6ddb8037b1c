"""Static board features used by the move scorer.

Every function here is a pure function of a :class:`chess.Board` (and the
colour whose point of view is being scored).  Nothing mutates the board and
nothing draws random numbers, so the same position always yields the same
terms.  Scores are expressed in centipawns and signed so that positive
values favour ``perspective``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

import chess

from .chess_logic import MoveRecord


Table = Tuple[int, ...]


PIECE_VALUES: Mapping[chess.PieceType, int] = {
    chess.PAWN: 100,
    chess.KNIGHT: 320,
    chess.BISHOP: 330,
    chess.ROOK: 500,
    chess.QUEEN: 900,
    chess.KING: 20000,
}

MATERIAL_PIECE_TYPES = (chess.PAWN, chess.KNIGHT, chess.BISHOP, chess.ROOK, chess.QUEEN)

CENTER_SQUARES = frozenset([chess.D4, chess.D5, chess.E4, chess.E5])
EXTENDED_CENTER_SQUARES = frozenset([
    chess.C3, chess.C4, chess.C5, chess.C6,
    chess.D3, chess.D6, chess.E3, chess.E6,
    chess.F3, chess.F4, chess.F5, chess.F6,
])

# Heuristics tuning constants (centipawns)
DOUBLED_PAWN_PENALTY = 20
ISOLATED_PAWN_PENALTY = 15
DETAILED_DOUBLED_PAWN_PENALTY = 30
DETAILED_ISOLATED_PAWN_PENALTY = 25
PASSED_PAWN_BONUS = 50
CASTLED_KING_BONUS = 60
KING_EXPOSURE_PENALTY = 10
CENTER_SQUARE_BONUS = 10
EXTENDED_CENTER_BONUS = 5
ENEMY_KING_EDGE_WEIGHT = 10
KING_PROXIMITY_WEIGHT = 5
DRAWISH_PIECE_LIMIT = 3
ENDGAME_PIECE_LIMIT = 6

DEVELOPMENT_BONUS = 30
CASTLING_BONUS = 40
EARLY_QUEEN_PENALTY = 30
CENTER_PAWN_BONUS = 25

# Piece-square tables are laid out visually: index 0 is a8, index 63 is h1.
_PAWN_TABLE: Table = (
    0, 0, 0, 0, 0, 0, 0, 0,
    50, 50, 50, 50, 50, 50, 50, 50,
    10, 10, 20, 30, 30, 20, 10, 10,
    5, 5, 10, 25, 25, 10, 5, 5,
    0, 0, 0, 20, 20, 0, 0, 0,
    5, -5, -10, 0, 0, -10, -5, 5,
    5, 10, 10, -20, -20, 10, 10, 5,
    0, 0, 0, 0, 0, 0, 0, 0,
)

_KNIGHT_TABLE: Table = (
    -50, -40, -30, -30, -30, -30, -40, -50,
    -40, -20, 0, 0, 0, 0, -20, -40,
    -30, 0, 10, 15, 15, 10, 0, -30,
    -30, 5, 15, 20, 20, 15, 5, -30,
    -30, 0, 15, 20, 20, 15, 0, -30,
    -30, 5, 10, 15, 15, 10, 5, -30,
    -40, -20, 0, 5, 5, 0, -20, -40,
    -50, -40, -30, -30, -30, -30, -40, -50,
)

_BISHOP_TABLE: Table = (
    -20, -10, -10, -10, -10, -10, -10, -20,
    -10, 0, 0, 0, 0, 0, 0, -10,
    -10, 0, 5, 10, 10, 5, 0, -10,
    -10, 5, 5, 10, 10, 5, 5, -10,
    -10, 0, 10, 10, 10, 10, 0, -10,
    -10, 10, 10, 10, 10, 10, 10, -10,
    -10, 5, 0, 0, 0, 0, 5, -10,
    -20, -10, -10, -10, -10, -10, -10, -20,
)

_ROOK_TABLE: Table = (
    0, 0, 0, 0, 0, 0, 0, 0,
    5, 10, 10, 10, 10, 10, 10, 5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    -5, 0, 0, 0, 0, 0, 0, -5,
    0, 0, 0, 5, 5, 0, 0, 0,
)

_QUEEN_TABLE: Table = (
    -20, -10, -10, -5, -5, -10, -10, -20,
    -10, 0, 0, 0, 0, 0, 0, -10,
    -10, 0, 5, 5, 5, 5, 0, -10,
    -5, 0, 5, 5, 5, 5, 0, -5,
    0, 0, 5, 5, 5, 5, 0, -5,
    -10, 5, 5, 5, 5, 5, 0, -10,
    -10, 0, 5, 0, 0, 0, 0, -10,
    -20, -10, -10, -5, -5, -10, -10, -20,
)

KING_MIDDLEGAME_TABLE: Table = (
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -30, -40, -40, -50, -50, -40, -40, -30,
    -20, -30, -30, -40, -40, -30, -30, -20,
    -10, -20, -20, -20, -20, -20, -20, -10,
    20, 20, 0, 0, 0, 0, 20, 20,
    20, 30, 10, 0, 0, 10, 30, 20,
)

KING_ENDGAME_TABLE: Table = (
    -50, -40, -30, -20, -20, -30, -40, -50,
    -30, -20, -10, 0, 0, -10, -20, -30,
    -30, -10, 20, 30, 30, 20, -10, -30,
    -30, -10, 30, 40, 40, 30, -10, -30,
    -30, -10, 30, 40, 40, 30, -10, -30,
    -30, -10, 20, 30, 30, 20, -10, -30,
    -30, -30, 0, 0, 0, 0, -30, -30,
    -50, -30, -30, -30, -30, -30, -30, -50,
)

PIECE_SQUARE_TABLES: Dict[chess.PieceType, Table] = {
    chess.PAWN: _PAWN_TABLE,
    chess.KNIGHT: _KNIGHT_TABLE,
    chess.BISHOP: _BISHOP_TABLE,
    chess.ROOK: _ROOK_TABLE,
    chess.QUEEN: _QUEEN_TABLE,
}

KING_TABLES: Dict[bool, Table] = {
    False: KING_MIDDLEGAME_TABLE,
    True: KING_ENDGAME_TABLE,
}


@dataclass(frozen=True)
class FeatureTerms:
    """Every feature term of one position, seen from ``perspective``."""

    perspective: chess.Color
    endgame: bool
    material: int
    piece_square: int
    pawn_structure: int
    king_safety: int
    king_zone_attacks: int
    mobility: int
    center_control: int
    endgame_position: float
    threat: int


# ---------------------------------------------------------------------------
# Phase and material
# ---------------------------------------------------------------------------

def is_endgame(board: chess.Board) -> bool:
    """True once the queens are gone or at most six rooks/minors remain."""

    if not board.queens:
        return True
    return chess.popcount(board.rooks | board.knights | board.bishops) <= ENDGAME_PIECE_LIMIT


def is_drawish(board: chess.Board) -> bool:
    non_king = board.occupied & ~board.kings
    return chess.popcount(non_king) <= DRAWISH_PIECE_LIMIT


def material(board: chess.Board, perspective: chess.Color) -> int:
    score = 0
    for piece_type in MATERIAL_PIECE_TYPES:
        own = len(board.pieces(piece_type, perspective))
        theirs = len(board.pieces(piece_type, not perspective))
        score += PIECE_VALUES[piece_type] * (own - theirs)
    return score


# ---------------------------------------------------------------------------
# Piece-square tables
# ---------------------------------------------------------------------------

def table_index(square: chess.Square, color: chess.Color) -> int:
    """Index into a visual table; Black reads the board rotated (63 - i)."""

    visual = chess.square_mirror(square)
    return visual if color == chess.WHITE else 63 - visual


def table_for(piece_type: chess.PieceType, endgame: bool) -> Table:
    if piece_type == chess.KING:
        return KING_TABLES[endgame]
    return PIECE_SQUARE_TABLES[piece_type]


def piece_square(board: chess.Board, perspective: chess.Color, endgame: bool) -> int:
    score = 0
    for square, piece in board.piece_map().items():
        value = table_for(piece.piece_type, endgame)[table_index(square, piece.color)]
        score += value if piece.color == perspective else -value
    return score


# ---------------------------------------------------------------------------
# Pawn structure
# ---------------------------------------------------------------------------

def pawn_files(board: chess.Board, color: chess.Color) -> List[int]:
    counts = [0] * 8
    for square in board.pieces(chess.PAWN, color):
        counts[chess.square_file(square)] += 1
    return counts


def is_isolated_file(file_index: int, pawns_by_file: List[int]) -> bool:
    left_file = pawns_by_file[file_index - 1] if file_index > 0 else 0
    right_file = pawns_by_file[file_index + 1] if file_index < 7 else 0
    return left_file == 0 and right_file == 0


def is_passed_pawn(square: chess.Square, color: chess.Color, enemy_pawns: chess.SquareSet) -> bool:
    """No enemy pawn stands on this pawn's file on or beyond its rank."""

    file_index = chess.square_file(square)
    rank = chess.square_rank(square)
    for enemy_square in enemy_pawns:
        if chess.square_file(enemy_square) != file_index:
            continue
        enemy_rank = chess.square_rank(enemy_square)
        if color == chess.WHITE and enemy_rank >= rank:
            return False
        if color == chess.BLACK and enemy_rank <= rank:
            return False
    return True


def pawn_structure(board: chess.Board, color: chess.Color, detailed: bool = False) -> int:
    """Doubled/isolated penalties per file, plus passed-pawn bonuses when ``detailed``.

    The coarse version only looks at how many pawns sit on each file.  The
    detailed version raises both penalties and walks every pawn to find the
    passed ones.
    """

    pawns_by_file = pawn_files(board, color)
    if detailed:
        doubled_penalty = DETAILED_DOUBLED_PAWN_PENALTY
        isolated_penalty = DETAILED_ISOLATED_PAWN_PENALTY
    else:
        doubled_penalty = DOUBLED_PAWN_PENALTY
        isolated_penalty = ISOLATED_PAWN_PENALTY

    score = 0
    for file_index, count in enumerate(pawns_by_file):
        if count == 0:
            continue
        if count > 1:
            score -= doubled_penalty
        if is_isolated_file(file_index, pawns_by_file):
            score -= isolated_penalty

    if detailed:
        enemy_pawns = board.pieces(chess.PAWN, not color)
        for square in board.pieces(chess.PAWN, color):
            if is_passed_pawn(square, color, enemy_pawns):
                score += PASSED_PAWN_BONUS
    return score


# ---------------------------------------------------------------------------
# Move generation helpers
# ---------------------------------------------------------------------------

def legal_moves_for(board: chess.Board, color: chess.Color) -> List[chess.Move]:
    """Legal moves ``color`` would have if it were on move."""

    if board.turn == color:
        return list(board.legal_moves)
    mirror = board.copy(stack=False)
    mirror.turn = color
    mirror.ep_square = None
    # After a checking move the flipped board offers captures of the enemy king.
    enemy_king = mirror.king(not color)
    return [move for move in mirror.legal_moves if move.to_square != enemy_king]


def mobility(board: chess.Board, color: chess.Color) -> int:
    return len(legal_moves_for(board, color))


def center_control(board: chess.Board, color: chess.Color) -> int:
    reached = {move.to_square for move in legal_moves_for(board, color)}
    return (
        CENTER_SQUARE_BONUS * len(reached & CENTER_SQUARES)
        + EXTENDED_CENTER_BONUS * len(reached & EXTENDED_CENTER_SQUARES)
    )


# ---------------------------------------------------------------------------
# King terms
# ---------------------------------------------------------------------------

def has_castled_shape(board: chess.Board, color: chess.Color) -> bool:
    king_square = board.king(color)
    if king_square is None:
        return False
    back_rank = 0 if color == chess.WHITE else 7
    if chess.square_rank(king_square) != back_rank:
        return False
    rook_file = {6: 5, 2: 3}.get(chess.square_file(king_square))
    if rook_file is None:
        return False
    piece = board.piece_at(chess.square(rook_file, back_rank))
    return piece is not None and piece.piece_type == chess.ROOK and piece.color == color


def exposed_king_squares(board: chess.Board, color: chess.Color) -> int:
    """Distinct destinations of legal moves within one square of ``color``'s king."""

    king_square = board.king(color)
    if king_square is None:
        return 0
    near = {
        move.to_square
        for move in board.legal_moves
        if chess.square_distance(move.to_square, king_square) <= 1
    }
    return len(near)


def king_safety(board: chess.Board, color: chess.Color, endgame: bool) -> int:
    if endgame or board.king(color) is None:
        return 0
    score = 0
    if has_castled_shape(board, color):
        score += CASTLED_KING_BONUS
    score -= KING_EXPOSURE_PENALTY * exposed_king_squares(board, color)
    return score


def king_zone_attacks(board: chess.Board, color: chess.Color) -> int:
    """Squares around the enemy king that ``color`` attacks."""

    enemy_king = board.king(not color)
    if enemy_king is None:
        return 0
    ring = chess.SquareSet(chess.BB_KING_ATTACKS[enemy_king])
    return sum(1 for square in ring if board.is_attacked_by(color, square))


def endgame_position(board: chess.Board, color: chess.Color) -> float:
    """Push the enemy king to the edge, or keep the kings together when drawish."""

    own_king = board.king(color)
    enemy_king = board.king(not color)
    if own_king is None or enemy_king is None:
        return 0.0
    if is_drawish(board):
        return -float(KING_PROXIMITY_WEIGHT * chess.square_distance(own_king, enemy_king))
    edge_distance = max(
        abs(chess.square_rank(enemy_king) - 3.5),
        abs(chess.square_file(enemy_king) - 3.5),
    )
    return ENEMY_KING_EDGE_WEIGHT * edge_distance


# ---------------------------------------------------------------------------
# Move-level terms
# ---------------------------------------------------------------------------

def opening_principles(record: MoveRecord) -> int:
    score = 0
    if record.piece_type in (chess.KNIGHT, chess.BISHOP):
        score += DEVELOPMENT_BONUS
    if record.is_castling or "O-O" in record.san:
        score += CASTLING_BONUS
    if record.piece_type == chess.QUEEN and not record.is_capture:
        score -= EARLY_QUEEN_PENALTY
    if record.piece_type == chess.PAWN and record.to_square in CENTER_SQUARES:
        score += CENTER_PAWN_BONUS
    return score


def threat(board: chess.Board) -> int:
    """Value of the most valuable piece the side to move can capture right now."""

    best = 0
    for move in board.legal_moves:
        if board.is_en_passant(move):
            value = PIECE_VALUES[chess.PAWN]
        elif board.is_castling(move):
            continue
        else:
            victim: Optional[chess.PieceType] = board.piece_type_at(move.to_square)
            if victim is None:
                continue
            value = PIECE_VALUES[victim]
        best = max(best, value)
    return best


def extract_features(
    board: chess.Board,
    perspective: chess.Color,
    *,
    detailed_pawns: bool = True,
) -> FeatureTerms:
    """Compute every feature term for ``board`` from ``perspective``."""

    endgame = is_endgame(board)
    return FeatureTerms(
        perspective=perspective,
        endgame=endgame,
        material=material(board, perspective),
        piece_square=piece_square(board, perspective, endgame),
        pawn_structure=pawn_structure(board, perspective, detailed_pawns),
        king_safety=king_safety(board, perspective, endgame),
        king_zone_attacks=king_zone_attacks(board, perspective),
        mobility=mobility(board, perspective),
        center_control=center_control(board, perspective),
        endgame_position=endgame_position(board, perspective) if endgame else 0.0,
        threat=threat(board),
    )


__all__ = [
    "CENTER_SQUARES",
    "EXTENDED_CENTER_SQUARES",
    "FeatureTerms",
    "PIECE_SQUARE_TABLES",
    "PIECE_VALUES",
    "center_control",
    "endgame_position",
    "extract_features",
    "is_drawish",
    "is_endgame",
    "is_passed_pawn",
    "king_safety",
    "king_zone_attacks",
    "legal_moves_for",
    "material",
    "mobility",
    "opening_principles",
    "pawn_structure",
    "piece_square",
    "table_index",
    "threat",
]
