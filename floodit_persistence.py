"""Versioned session snapshot storage for Flood-It."""

from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from floodit_engine import (
    CLASSIC,
    COLOR_NAMES,
    CUSTOM_DIFFICULTY_NAME,
    GAME_MODES,
    CustomGameSettings,
    Difficulty,
)
from floodit_flow import CustomConfig, DifficultyConfig, LastGameConfig

logger = logging.getLogger(__name__)

STORAGE_KEY = "floodit.state.v1"
STORAGE_VERSION = 1

DEFAULT_BOARD_SIZE = 10
DEFAULT_MOVE_LIMIT = 20
DEFAULT_DIFFICULTY_SIZE = 10
DEFAULT_DIFFICULTY_MAX_STEPS = 0

BOARD_SIZE_RANGE = (5, 25)
MOVE_LIMIT_RANGE = (5, 100)
DIFFICULTY_SIZE_RANGE = (1, 25)
DIFFICULTY_MAX_STEPS_RANGE = (0, 500)

VALID_COLORS = frozenset(COLOR_NAMES)


@dataclass(frozen=True)
class PersistedState:
    selected_color: str = ""
    last_game_config: LastGameConfig = None
    custom_settings: CustomGameSettings = field(default_factory=CustomGameSettings)


class Storage(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    def __init__(self) -> None:
        self.items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = str(value)


class FileStorage:
    """One JSON file per key, replaced atomically on write."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as handle:
            handle.write(value)
            handle.flush()
            os.fsync(handle.fileno())
        tmp_path.replace(path)


def default_state_dir() -> Path:
    return Path.home() / ".floodit"


def _to_safe_integer(value: Any, fallback: int, minimum: int, maximum: int) -> int:
    number: Optional[int] = None
    if isinstance(value, bool):
        number = int(value)
    elif isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if math.isfinite(value):
            number = int(value)
    elif isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            parsed = math.nan
        if math.isfinite(parsed):
            number = int(parsed)

    if number is None:
        return fallback
    return min(maximum, max(minimum, number))


def _sanitize_game_mode(value: Any) -> str:
    if isinstance(value, str) and value in GAME_MODES:
        return value
    return CLASSIC


def sanitize_difficulty(value: Any) -> Optional[Difficulty]:
    if not isinstance(value, dict):
        return None

    name = value.get("name")
    mode = value.get("mode")
    return Difficulty(
        name=name if isinstance(name, str) and name else CUSTOM_DIFFICULTY_NAME,
        rows=_to_safe_integer(value.get("rows"), DEFAULT_DIFFICULTY_SIZE, *DIFFICULTY_SIZE_RANGE),
        columns=_to_safe_integer(value.get("columns"), DEFAULT_DIFFICULTY_SIZE, *DIFFICULTY_SIZE_RANGE),
        max_steps=_to_safe_integer(
            value.get("maxSteps", DEFAULT_DIFFICULTY_MAX_STEPS),
            DEFAULT_DIFFICULTY_MAX_STEPS,
            *DIFFICULTY_MAX_STEPS_RANGE,
        ),
        mode=mode if isinstance(mode, str) and mode in GAME_MODES else None,
    )


def sanitize_custom_settings(value: Any) -> CustomGameSettings:
    if not isinstance(value, dict):
        return CustomGameSettings()

    return CustomGameSettings(
        game_mode=_sanitize_game_mode(value.get("gameMode")),
        board_size=_to_safe_integer(value.get("boardSize"), DEFAULT_BOARD_SIZE, *BOARD_SIZE_RANGE),
        custom_move_limit=bool(value.get("customMoveLimit")),
        move_limit=_to_safe_integer(value.get("moveLimit"), DEFAULT_MOVE_LIMIT, *MOVE_LIMIT_RANGE),
    )


def sanitize_last_game_config(value: Any) -> LastGameConfig:
    if not isinstance(value, dict):
        return None

    config_type = value.get("type")
    if config_type == "difficulty":
        difficulty = sanitize_difficulty(value.get("difficulty"))
        if difficulty is None:
            return None
        return DifficultyConfig(difficulty)

    if config_type == "custom":
        return CustomConfig(sanitize_custom_settings(value.get("settings")))

    return None


def sanitize_persisted_snapshot(raw: Any) -> Optional[PersistedState]:
    if not isinstance(raw, dict):
        return None
    version = raw.get("version")
    if isinstance(version, bool) or version != STORAGE_VERSION:
        return None
    data = raw.get("data")
    if not isinstance(data, dict):
        return None

    selected_color = data.get("selectedColor")
    if not isinstance(selected_color, str) or selected_color not in VALID_COLORS:
        selected_color = ""

    return PersistedState(
        selected_color=selected_color,
        last_game_config=sanitize_last_game_config(data.get("lastGameConfig")),
        custom_settings=sanitize_custom_settings(data.get("customSettings")),
    )


def difficulty_to_dict(difficulty: Difficulty) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "name": difficulty.name,
        "rows": difficulty.rows,
        "columns": difficulty.columns,
    }
    if difficulty.max_steps is not None:
        payload["maxSteps"] = difficulty.max_steps
    if difficulty.mode is not None:
        payload["mode"] = difficulty.mode
    return payload


def custom_settings_to_dict(settings: CustomGameSettings) -> Dict[str, Any]:
    return {
        "gameMode": settings.game_mode,
        "boardSize": settings.board_size,
        "customMoveLimit": settings.custom_move_limit,
        "moveLimit": settings.move_limit,
    }


def last_game_config_to_dict(config: LastGameConfig) -> Optional[Dict[str, Any]]:
    if isinstance(config, DifficultyConfig):
        return {"type": "difficulty", "difficulty": difficulty_to_dict(config.difficulty)}
    if isinstance(config, CustomConfig):
        return {"type": "custom", "settings": custom_settings_to_dict(config.settings)}
    return None


def to_snapshot(state: PersistedState) -> Dict[str, Any]:
    return {
        "version": STORAGE_VERSION,
        "data": {
            "selectedColor": state.selected_color,
            "lastGameConfig": last_game_config_to_dict(state.last_game_config),
            "customSettings": custom_settings_to_dict(state.custom_settings),
        },
    }


def load_persisted_state(storage: Optional[Storage]) -> Optional[PersistedState]:
    if storage is None:
        return None

    try:
        raw = storage.get_item(STORAGE_KEY)
        if not raw:
            return None
        return sanitize_persisted_snapshot(json.loads(raw))
    except Exception:
        logger.debug("discarding unreadable snapshot under %s", STORAGE_KEY, exc_info=True)
        return None


def save_persisted_state(state: PersistedState, storage: Optional[Storage]) -> None:
    if storage is None:
        return

    try:
        storage.set_item(STORAGE_KEY, json.dumps(to_snapshot(state)))
    except Exception:
        logger.debug("snapshot write failed for %s", STORAGE_KEY, exc_info=True)
