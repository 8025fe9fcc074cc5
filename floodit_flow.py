"""Move transactions and round continuation for Flood-It."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from floodit_engine import (
    CLASSIC,
    START,
    Board,
    CustomGameSettings,
    Difficulty,
    flood,
    get_steps_left,
    is_board_won,
)

PLAYING = "playing"
WON = "won"
LOST = "lost"


class MoveOutcome(Enum):
    NO_OP = "no_op"
    REFUSED = "refused"
    WON = "won"
    LOST = "lost"
    PLAYING = "playing"


_GAME_STATE_BY_OUTCOME = {
    MoveOutcome.NO_OP: None,
    MoveOutcome.REFUSED: LOST,
    MoveOutcome.WON: WON,
    MoveOutcome.LOST: LOST,
    MoveOutcome.PLAYING: PLAYING,
}


@dataclass(frozen=True)
class MoveResult:
    outcome: MoveOutcome

    @property
    def success(self) -> bool:
        return self.outcome not in (MoveOutcome.NO_OP, MoveOutcome.REFUSED)

    @property
    def game_state(self) -> Optional[str]:
        return _GAME_STATE_BY_OUTCOME[self.outcome]

    @property
    def is_terminal(self) -> bool:
        return self.game_state in (WON, LOST)


@dataclass(frozen=True)
class MoveResolution:
    next_board: Optional[Board]
    result: MoveResult


@dataclass(frozen=True)
class DifficultyConfig:
    difficulty: Difficulty
    type: str = "difficulty"


@dataclass(frozen=True)
class CustomConfig:
    settings: CustomGameSettings
    type: str = "custom"


LastGameConfig = Optional[Union[DifficultyConfig, CustomConfig]]
RoundStartTarget = Optional[Union[DifficultyConfig, CustomConfig]]


def resolve_move(board: Optional[Board], color_name: str) -> MoveResolution:
    """Apply one color choice and classify the outcome.

    Win is checked before budget exhaustion: a move that completes the
    board with the last remaining step is a win.
    """
    if board is None or get_steps_left(board) < 1:
        return MoveResolution(board, MoveResult(MoveOutcome.REFUSED))

    if board.matrix[START.row][START.column] == color_name:
        return MoveResolution(board, MoveResult(MoveOutcome.NO_OP))

    next_board = flood(board, color_name)

    if is_board_won(next_board):
        return MoveResolution(next_board, MoveResult(MoveOutcome.WON))

    if get_steps_left(next_board) < 1:
        return MoveResolution(next_board, MoveResult(MoveOutcome.LOST))

    return MoveResolution(next_board, MoveResult(MoveOutcome.PLAYING))


def resolve_round_start_target(last_game_config: LastGameConfig, board: Optional[Board]) -> RoundStartTarget:
    if last_game_config is not None:
        return last_game_config

    if board is not None:
        return DifficultyConfig(
            Difficulty(
                name=board.name,
                rows=board.rows,
                columns=board.columns,
                max_steps=board.max_steps,
                mode=board.mode or CLASSIC,
            )
        )

    return None
