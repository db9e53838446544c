"""
Phrase indices: every admissible spoken phrase for the current legal moves.

Keys are comma-joined value sequences ("N,f,3", "castle", "O-O"); values are a move
identifier (UCI, e.g. "g1f3" or "e7e8q"), a selectable square ("g1"), or a set of them.

- build_move_index: full move phrases (coordinates, SAN-like role phrases, pawn shorthands,
  captures by role, castling aliases, promotions).
- build_square_index: partial phrases (a square, a role) used for selection and for
  completing a move once a source square is selected.

Both must be rebuilt whenever the board, the legal moves or the selection change.
"""
from __future__ import annotations

import chess

PhraseIndex = dict[str, str | set[str]]

ROLES = "PNBRQK"
PROMOTION_ROLES = "QRBN"


def src(uci: str) -> str:
    return uci[:2]


def dest(uci: str) -> str:
    return uci[2:4]


def promo(uci: str) -> str:
    return uci[4:]


def push_map(index: PhraseIndex, key: str, out: str) -> None:
    cur = index.get(key)
    if cur is None:
        index[key] = out
    elif isinstance(cur, set):
        cur.add(out)
    elif cur != out:
        index[key] = {cur, out}


def spread(outs: str | set[str] | None) -> list[str]:
    if outs is None:
        return []
    if isinstance(outs, str):
        return [outs]
    return sorted(outs)


def spread_map(index: PhraseIndex) -> list[tuple[str, list[str]]]:
    return [(key, spread(outs)) for key, outs in index.items()]


def remove(index: PhraseIndex, key: str, out: str) -> None:
    cur = index.get(key)
    if cur is None:
        return
    if isinstance(cur, str):
        if cur == out:
            del index[key]
        return
    cur.discard(out)
    if not cur:
        del index[key]
    elif len(cur) == 1:
        index[key] = next(iter(cur))


def to_vals(toks: str) -> str:
    """Every phrase token here is its own value, so splitting characters maps to value space."""
    return ",".join(toks)


def legal_ucis(board: chess.Board) -> list[str]:
    """Coordinate pairs of the legal moves; promotions collapse onto their pair."""
    return list(dict.fromkeys(m.uci()[:4] for m in board.legal_moves))


def _role(piece: chess.Piece) -> str:
    return piece.symbol().upper()


def qualifier(board: chess.Board, uci: str) -> str:
    """The file/rank disambiguator python-chess writes into the SAN of a piece move."""
    san = board.san(chess.Move.from_uci(uci[:4]))
    body = san.rstrip("+#").replace("x", "")
    return body[1:-2]


def build_move_index(board: chess.Board, ucis: list[str] | None = None) -> PhraseIndex:
    ucis = legal_ucis(board) if ucis is None else ucis
    moves: PhraseIndex = {}
    for uci in ucis:
        usrc, udest = src(uci), dest(uci)
        nsrc, ndest = chess.parse_square(usrc), chess.parse_square(udest)
        piece = board.piece_at(nsrc)
        if piece is None:
            continue
        srole = _role(piece)
        dp = board.piece_at(ndest)
        move = chess.Move(nsrc, ndest)

        if srole == "K" and board.is_castling(move):
            push_map(moves, "castle", uci)
            moves["O-O-O" if ndest < nsrc else "O-O"] = uci

        phrases: dict[str, None] = {uci: None}  # ordered set of exact token phrases
        capture = dp is not None and dp.color != piece.color
        if capture:
            drole = _role(dp)
            for p in (f"{srole}{drole}", f"{srole}x{drole}", f"x{drole}", "x"):
                phrases[p] = None
            # kept out of the phrase set so it is not crossed with promotion roles
            push_map(moves, f"{srole},x", uci)

        if srole == "P":
            phrases[udest] = None  # includes en passant
            if usrc[0] == udest[0]:
                phrases[f"P{udest}"] = None
            elif capture:
                for p in (f"{usrc}x{udest}", f"Px{udest}", f"{usrc[0]}{udest}", f"{usrc[0]}x{udest}"):
                    phrases[p] = None
            else:
                for p in (f"{usrc}{udest}", f"{usrc[0]}{udest}", f"P{usrc[0]}{udest}", f"{usrc[0]}x{udest}"):
                    phrases[p] = None
            if udest[1] in "18":
                for toks in list(phrases):
                    for role in PROMOTION_ROLES:
                        for xtoks in (f"{toks}={role}", f"{toks}{role}"):
                            push_map(moves, to_vals(xtoks), uci + role.lower())
        else:
            qual = "" if srole == "K" else qualifier(board, uci)
            for prefix in dict.fromkeys((f"{srole}{qual}", srole)):
                if capture:
                    phrases[f"{prefix}x{udest}"] = None
                phrases[f"{prefix}{udest}"] = None

        for toks in phrases:
            push_map(moves, to_vals(toks), uci)
    return moves


def build_square_index(
    board: chess.Board,
    ucis: list[str] | None = None,
    selection: str | None = None,
    max_choices: int = 8,
) -> PhraseIndex:
    ucis = legal_ucis(board) if ucis is None else ucis
    squares: PhraseIndex = {}
    for uci in ucis:
        if selection and not uci.startswith(selection):
            continue
        usrc, udest = src(uci), dest(uci)
        piece = board.piece_at(chess.parse_square(usrc))
        if piece is None:
            continue
        srole = _role(piece)
        dp = board.piece_at(chess.parse_square(udest))
        push_map(squares, to_vals(usrc), usrc)
        push_map(squares, to_vals(udest), uci)
        if srole != "P":
            push_map(squares, srole, uci)
            push_map(squares, srole, usrc)
        if dp is not None and dp.color != piece.color:
            push_map(squares, _role(dp), uci)

    # a role either selects a piece or names its moves, never both: past max_choices moves
    # it keeps only the source squares, otherwise only the moves
    for key in [k for k in squares if len(k) == 1 and k in ROLES]:
        outs = spread(squares[key])
        role_moves = [x for x in outs if len(x) > 2]
        if len(role_moves) > max_choices:
            for x in role_moves:
                remove(squares, key, x)
        elif role_moves:
            for x in outs:
                if len(x) == 2:
                    remove(squares, key, x)
    return squares
