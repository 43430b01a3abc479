"""Board model: line scans over a single 3x3 grid.

The same functions work on a sub-board's cells and on the meta-board's list
of sub-board winners.
"""

WIN_LINES = [
    (0,1,2),(3,4,5),(6,7,8),
    (0,3,6),(1,4,7),(2,5,8),
    (0,4,8),(2,4,6)
]

CENTER  = 4
CORNERS = frozenset({0, 2, 6, 8})


def winning_line(cells):
    """Return the first line holding three equal non-empty values, or None."""
    for a, b, c in WIN_LINES:
        if cells[a] and cells[a] == cells[b] == cells[c]:
            return (a, b, c)
    return None

def sub_board_winner(cells):
    line = winning_line(cells)
    return cells[line[0]] if line else None

def is_full(cells):
    return all(cell is not None for cell in cells)

def open_lines(cells, mark):
    """Count lines with two `mark` cells and the third one empty."""
    count = 0
    for a, b, c in WIN_LINES:
        line = (cells[a], cells[b], cells[c])
        if line.count(mark) == 2 and line.count(None) == 1:
            count += 1
    return count
