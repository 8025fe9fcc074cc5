"""Core rules engine for Flood-It (classic and maze modes)."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, replace
from typing import Deque, Iterator, List, Optional, Set, Tuple

CLASSIC = "classic"
MAZE = "maze"
GAME_MODES = (CLASSIC, MAZE)

AUTO_GENERATE_SEED = 0

LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280


@dataclass(frozen=True)
class GameColor:
    name: str
    hex: str


DEFAULT_COLORS: Tuple[GameColor, ...] = (
    GameColor("blue", "#3584e4"),
    GameColor("green", "#33d17a"),
    GameColor("yellow", "#f6d32d"),
    GameColor("orange", "#ff7800"),
    GameColor("red", "#ed333b"),
    GameColor("purple", "#9141ac"),
)

COLOR_NAMES: Tuple[str, ...] = tuple(color.name for color in DEFAULT_COLORS)


@dataclass(frozen=True)
class Position:
    row: int
    column: int


START = Position(0, 0)


@dataclass(frozen=True)
class Board:
    name: str
    seed: int
    rows: int
    columns: int
    step: int
    max_steps: int
    matrix: Tuple[Tuple[str, ...], ...]
    mode: str = CLASSIC
    walls: Optional[Tuple[Tuple[bool, ...], ...]] = None
    goal: Optional[Position] = None


@dataclass(frozen=True)
class Difficulty:
    name: str
    rows: int
    columns: int
    max_steps: Optional[int] = None
    mode: Optional[str] = None


@dataclass(frozen=True)
class CustomGameSettings:
    game_mode: str = CLASSIC
    board_size: int = 10
    custom_move_limit: bool = False
    move_limit: int = 20


DIFFICULTIES: Tuple[Difficulty, ...] = (
    Difficulty("Easy", 6, 6, 15, CLASSIC),
    Difficulty("Normal", 10, 10, 20, CLASSIC),
    Difficulty("Hard", 14, 14, 25, CLASSIC),
    Difficulty("Maze Easy", 10, 10, 22, MAZE),
    Difficulty("Maze Normal", 12, 12, 24, MAZE),
    Difficulty("Maze Hard", 14, 14, 28, MAZE),
    Difficulty("Custom", 0, 0),
)

CUSTOM_DIFFICULTY_NAME = "Custom"


def is_custom_sentinel(difficulty: Difficulty) -> bool:
    return difficulty.name == CUSTOM_DIFFICULTY_NAME and difficulty.rows == 0 and difficulty.columns == 0


class LcgRandom:
    """Deterministic linear congruential stream of floats in [0, 1).

    Same seed, same sequence. ``reset`` rewinds to the first draw so the
    stream can be replayed.
    """

    def __init__(self, seed: int) -> None:
        self.seed = seed
        self.state = seed

    def random(self) -> float:
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_MODULUS

    def choice_index(self, size: int) -> int:
        return int(self.random() * size)

    def reset(self) -> None:
        self.state = self.seed

    def __iter__(self) -> Iterator[float]:
        while True:
            yield self.random()


def resolve_seed(seed: int) -> int:
    if seed == AUTO_GENERATE_SEED:
        return int(time.time() * 1000)
    return seed


def create_default_board() -> Board:
    return Board(
        name=CUSTOM_DIFFICULTY_NAME,
        seed=AUTO_GENERATE_SEED,
        rows=0,
        columns=0,
        step=0,
        max_steps=1,
        matrix=(),
    )


def calculate_max_steps(board: Board) -> int:
    # 30 * (rows * colors) / (17 * 6), floored
    palette_size = len(DEFAULT_COLORS)
    return (30 * (board.rows * palette_size)) // (17 * 6)


def get_steps_left(board: Board) -> int:
    return board.max_steps - board.step


def initialize_board(
    name: str,
    rows: int,
    columns: int,
    seed: int = AUTO_GENERATE_SEED,
    max_steps: int = 0,
) -> Board:
    if rows < 1 or columns < 1:
        raise ValueError("rows and columns must be positive")

    seed = resolve_seed(seed)
    rng = LcgRandom(seed)
    palette_size = len(COLOR_NAMES)
    matrix = tuple(
        tuple(COLOR_NAMES[rng.choice_index(palette_size)] for _ in range(columns))
        for _ in range(rows)
    )

    board = Board(
        name=name,
        seed=seed,
        rows=rows,
        columns=columns,
        step=0,
        max_steps=max_steps,
        matrix=matrix,
        mode=CLASSIC,
    )
    if max_steps == 0:
        board = replace(board, max_steps=calculate_max_steps(board))
    return board


def _carve_lattice(walls: List[List[bool]], rows: int, columns: int, rng: LcgRandom) -> None:
    walls[0][0] = False
    stack: List[Tuple[int, int]] = [(0, 0)]
    while stack:
        row, col = stack[-1]
        candidates = []
        for d_row, d_col in ((-2, 0), (2, 0), (0, -2), (0, 2)):
            n_row = row + d_row
            n_col = col + d_col
            if 0 <= n_row < rows and 0 <= n_col < columns and walls[n_row][n_col]:
                candidates.append((n_row, n_col))
        if not candidates:
            stack.pop()
            continue
        n_row, n_col = candidates[rng.choice_index(len(candidates))]
        walls[(row + n_row) // 2][(col + n_col) // 2] = False
        walls[n_row][n_col] = False
        stack.append((n_row, n_col))


def _carve_staircase(walls: List[List[bool]], goal: Position, rng: LcgRandom) -> None:
    row, col = goal.row, goal.column
    walls[row][col] = False
    while row > 0 or col > 0:
        if row > 0 and col > 0:
            if rng.random() < 0.5:
                row -= 1
            else:
                col -= 1
        elif row > 0:
            row -= 1
        else:
            col -= 1
        walls[row][col] = False


def initialize_maze_board(
    name: str,
    rows: int,
    columns: int,
    seed: int = AUTO_GENERATE_SEED,
    max_steps: int = 0,
) -> Board:
    base = initialize_board(name, rows, columns, seed, max_steps)
    goal = Position(rows - 1, columns - 1)

    walls = [[True] * columns for _ in range(rows)]
    rng = LcgRandom(base.seed)
    _carve_lattice(walls, rows, columns, rng)
    _carve_staircase(walls, goal, rng)

    return replace(
        base,
        mode=MAZE,
        walls=tuple(tuple(row) for row in walls),
        goal=goal,
    )


def initialize_custom_board(settings: CustomGameSettings, seed: int = AUTO_GENERATE_SEED) -> Board:
    if settings.game_mode == MAZE:
        return initialize_maze_board(
            "Custom Maze",
            settings.board_size,
            settings.board_size,
            seed,
            settings.move_limit,
        )
    return initialize_board(
        CUSTOM_DIFFICULTY_NAME,
        settings.board_size,
        settings.board_size,
        seed,
        settings.move_limit,
    )


def start_board_for_difficulty(difficulty: Difficulty, seed: int = AUTO_GENERATE_SEED) -> Board:
    generator = initialize_maze_board if difficulty.mode == MAZE else initialize_board
    return generator(
        difficulty.name,
        difficulty.rows,
        difficulty.columns,
        seed,
        difficulty.max_steps or 0,
    )


def reset_board(board: Board) -> Board:
    generator = initialize_maze_board if board.mode == MAZE else initialize_board
    return generator(board.name, board.rows, board.columns, board.seed, board.max_steps)


def _is_wall(board: Board, row: int, col: int) -> bool:
    return board.walls is not None and board.walls[row][col]


def neighbors(board: Board, pos: Position) -> List[Position]:
    row, col = pos.row, pos.column
    result: List[Position] = []
    if row > 0:
        result.append(Position(row - 1, col))
    if col > 0:
        result.append(Position(row, col - 1))
    if row < board.rows - 1:
        result.append(Position(row + 1, col))
    if col < board.columns - 1:
        result.append(Position(row, col + 1))
    return result


def connected_region(board: Board) -> Set[Position]:
    """Cells reachable from Start through non-wall cells of the Start color."""
    target = board.matrix[START.row][START.column]
    visited: Set[Position] = {START}
    queue: Deque[Position] = deque([START])
    while queue:
        current = queue.popleft()
        for pos in neighbors(board, current):
            if pos in visited or _is_wall(board, pos.row, pos.column):
                continue
            if board.matrix[pos.row][pos.column] != target:
                continue
            visited.add(pos)
            queue.append(pos)
    return visited


def flood(board: Board, new_color: str) -> Board:
    if board.matrix[START.row][START.column] == new_color:
        return board

    matrix = [list(row) for row in board.matrix]
    for pos in connected_region(board):
        matrix[pos.row][pos.column] = new_color

    return replace(
        board,
        matrix=tuple(tuple(row) for row in matrix),
        step=board.step + 1,
    )


def is_all_filled(board: Board) -> bool:
    target = board.matrix[START.row][START.column]
    return all(cell == target for row in board.matrix for cell in row)


def is_goal_reached(board: Board) -> bool:
    goal = board.goal
    if goal is None:
        return False
    if not (0 <= goal.row < board.rows and 0 <= goal.column < board.columns):
        return False
    return goal in connected_region(board)


def is_board_won(board: Board) -> bool:
    if board.mode == MAZE or board.goal is not None:
        return is_goal_reached(board)
    return is_all_filled(board)


def is_game_over(board: Board) -> bool:
    return is_board_won(board) or get_steps_left(board) < 1


def pretty_print(board: Board) -> str:
    """
    Text rendering of a board.

    One upper-case initial per cell (B G Y O R P), ``#`` for walls, and the
    goal cell in lower case.
    """
    mode = board.mode or CLASSIC
    header = (
        f"{board.name} ({mode}) | seed {board.seed} | "
        f"move {board.step}/{board.max_steps} | left {get_steps_left(board)}"
    )
    lines = [header]
    for row in range(board.rows):
        cells = []
        for col in range(board.columns):
            if _is_wall(board, row, col):
                cells.append("#")
                continue
            letter = board.matrix[row][col][:1].upper()
            if board.goal is not None and board.goal == Position(row, col):
                letter = letter.lower()
            cells.append(letter)
        lines.append(" ".join(cells))
    return "\n".join(lines)
