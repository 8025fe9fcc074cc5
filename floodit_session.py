"""Session state shared by the Flood-It front-ends."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from floodit_engine import (
    AUTO_GENERATE_SEED,
    Board,
    CustomGameSettings,
    Difficulty,
    get_steps_left,
    initialize_custom_board,
    is_board_won,
    is_custom_sentinel,
    is_game_over,
    reset_board,
    start_board_for_difficulty,
)
from floodit_flow import (
    CustomConfig,
    DifficultyConfig,
    LastGameConfig,
    MoveResult,
    resolve_move,
    resolve_round_start_target,
)
from floodit_persistence import PersistedState, Storage, load_persisted_state, save_persisted_state

logger = logging.getLogger(__name__)


class FloodSession:
    """Current board plus the settings that survive between rounds.

    Every change to the selected color, the custom settings or the last
    game configuration is written back to ``storage`` (best effort).
    """

    def __init__(self, storage: Optional[Storage] = None) -> None:
        self.storage = storage
        self.board: Optional[Board] = None
        persisted = load_persisted_state(storage) or PersistedState()
        self.selected_color = persisted.selected_color
        self.custom_settings = persisted.custom_settings
        self.last_game_config: LastGameConfig = persisted.last_game_config

    @property
    def steps_left(self) -> int:
        return get_steps_left(self.board) if self.board is not None else 0

    @property
    def is_game_over(self) -> bool:
        return self.board is not None and is_game_over(self.board)

    @property
    def has_won(self) -> bool:
        return self.board is not None and is_board_won(self.board)

    def persist(self) -> None:
        save_persisted_state(
            PersistedState(
                selected_color=self.selected_color,
                last_game_config=self.last_game_config,
                custom_settings=self.custom_settings,
            ),
            self.storage,
        )

    def start_difficulty(self, difficulty: Difficulty, seed: int = AUTO_GENERATE_SEED) -> bool:
        if is_custom_sentinel(difficulty):
            if difficulty.mode:
                self.update_custom_settings(replace(self.custom_settings, game_mode=difficulty.mode))
            return False

        self.board = start_board_for_difficulty(difficulty, seed)
        self.selected_color = ""
        self.last_game_config = DifficultyConfig(difficulty)
        logger.info("started %s board with seed %d", difficulty.name, self.board.seed)
        self.persist()
        return True

    def update_custom_settings(self, settings: CustomGameSettings) -> None:
        self.custom_settings = settings
        self.persist()

    def start_custom(self, settings: CustomGameSettings, seed: int = AUTO_GENERATE_SEED) -> Board:
        self.custom_settings = settings
        board_settings = settings if settings.custom_move_limit else replace(settings, move_limit=0)
        self.board = initialize_custom_board(board_settings, seed)
        self.selected_color = ""
        self.last_game_config = CustomConfig(settings)
        logger.info("started %s board with seed %d", self.board.name, self.board.seed)
        self.persist()
        return self.board

    def play(self, color_name: str) -> Optional[MoveResult]:
        if self.board is None or self.is_game_over:
            return None

        self.selected_color = color_name
        resolution = resolve_move(self.board, color_name)
        self.board = resolution.next_board
        if resolution.result.is_terminal:
            logger.info("round finished: %s after %d moves", resolution.result.game_state, self.board.step)
        self.persist()
        return resolution.result

    def reset(self) -> bool:
        if self.board is None:
            return False
        self.board = reset_board(self.board)
        self.selected_color = ""
        self.persist()
        return True

    def start_new_round(self, seed: int = AUTO_GENERATE_SEED) -> bool:
        target = resolve_round_start_target(self.last_game_config, self.board)
        if target is None:
            return False
        if isinstance(target, DifficultyConfig):
            return self.start_difficulty(target.difficulty, seed)
        self.start_custom(target.settings, seed)
        return True

    def quit(self) -> None:
        self.board = None
        self.selected_color = ""
        self.persist()
