import chess
import pytest

from opponent import chess_logic
from opponent.errors import IllegalMoveError


def test_make_move_updates_board_and_describes_move() -> None:
    board = chess.Board()
    record = chess_logic.make_move(board, chess.Move.from_uci("e2e4"))
    assert board.piece_at(chess.E4).piece_type == chess.PAWN
    assert record.san == "e4"
    assert record.piece_type == chess.PAWN
    assert record.captured is None
    assert record.from_square == chess.E2
    assert record.to_square == chess.E4


def test_make_move_rejects_illegal_move_without_touching_board() -> None:
    board = chess.Board()
    with pytest.raises(IllegalMoveError):
        chess_logic.make_move(board, chess.Move.from_uci("e2e5"))
    assert board.fen() == chess.STARTING_FEN
    assert not board.move_stack


def test_get_possible_moves_filters_by_origin_square() -> None:
    board = chess.Board()
    moves = chess_logic.get_possible_moves(board, chess.G1)
    assert sorted(record.uci() for record in moves) == ["g1f3", "g1h3"]
    assert len(chess_logic.get_possible_moves(board)) == 20


def test_describe_move_reports_captures_and_castling() -> None:
    board = chess.Board("rnbqkbnr/ppp1pppp/8/3p4/4P3/8/PPPP1PPP/RNBQKBNR w KQkq d6 0 2")
    capture = chess_logic.describe_move(board, chess.Move.from_uci("e4d5"))
    assert capture.captured == chess.PAWN
    assert capture.is_capture
    assert capture.san == "exd5"

    castle_board = chess.Board("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    castle = chess_logic.describe_move(castle_board, chess.Move.from_uci("e1g1"))
    assert castle.is_castling
    assert castle.piece_type == chess.KING
    assert castle.captured is None
    assert castle.san == "O-O"


def test_describe_move_counts_en_passant_as_pawn_capture() -> None:
    board = chess.Board("4k3/8/8/3Pp3/8/8/8/4K3 w - e6 0 2")
    record = chess_logic.describe_move(board, chess.Move.from_uci("d5e6"))
    assert record.captured == chess.PAWN


def test_candidate_moves_only_promote_to_queen() -> None:
    board = chess.Board("8/5P2/8/8/8/8/8/K5k1 w - - 0 1")
    promotions = [
        record.promotion
        for record in chess_logic.candidate_moves(board)
        if record.from_square == chess.F7
    ]
    assert promotions == [chess.QUEEN]
    assert len(chess_logic.get_possible_moves(board, chess.F7)) == 4


def test_game_status_queries() -> None:
    checkmate = chess.Board()
    for san in ("f3", "e5", "g4", "Qh4#"):
        checkmate.push_san(san)
    assert chess_logic.is_game_over(checkmate) is True
    assert chess_logic.is_checkmate(checkmate) is True
    assert chess_logic.is_in_check(checkmate) is True
    assert chess_logic.get_game_result(checkmate) == "Checkmate"
    assert chess_logic.side_to_move(checkmate) == chess.WHITE

    stalemate = chess.Board("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    assert chess_logic.is_stalemate(stalemate) is True
    assert chess_logic.is_draw(stalemate) is True
    assert chess_logic.get_game_result(stalemate) == "Stalemate"

    in_progress = chess.Board()
    assert chess_logic.is_draw(in_progress) is False
    assert chess_logic.get_game_result(in_progress) == "Game in progress"


def test_threefold_repetition_counts_as_draw() -> None:
    board = chess.Board()
    for _ in range(2):
        for uci in ("g1f3", "g8f6", "f3g1", "f6g8"):
            board.push_uci(uci)
    assert chess_logic.is_draw(board) is True


def test_undo_move_returns_boolean_state() -> None:
    board = chess.Board()
    chess_logic.make_move(board, chess.Move.from_uci("e2e4"))
    assert chess_logic.undo_move(board) is True
    assert chess_logic.undo_move(board) is False


def test_export_board_state_and_history() -> None:
    board = chess.Board()
    for uci in ["e2e4", "e7e5", "g1f3"]:
        chess_logic.make_move(board, chess.Move.from_uci(uci))

    assert chess_logic.export_board_fen(board) == board.fen()
    assert chess_logic.export_move_history_san(board) == "e4 e5 Nf3"
