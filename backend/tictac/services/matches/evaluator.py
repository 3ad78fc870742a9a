from typing import Optional, Sequence

# 3 rows, 3 columns, 2 diagonals (row-major indices)
WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


def evaluate(board: Sequence[Optional[str]]) -> Optional[str]:
    """Return the mark that owns a full line, or None."""
    for a, b, c in WIN_LINES:
        if board[a] and board[a] == board[b] == board[c]:
            return board[a]
    return None


def is_full(board: Sequence[Optional[str]]) -> bool:
    return all(cell is not None for cell in board)
