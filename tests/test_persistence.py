import json
import tempfile
import unittest
from pathlib import Path

from floodit_engine import CustomGameSettings, Difficulty
from floodit_flow import CustomConfig, DifficultyConfig
from floodit_persistence import (
    STORAGE_KEY,
    FileStorage,
    MemoryStorage,
    PersistedState,
    load_persisted_state,
    sanitize_persisted_snapshot,
    save_persisted_state,
    to_snapshot,
)


class FailingStorage:
    def get_item(self, key):
        raise OSError("storage offline")

    def set_item(self, key, value):
        raise OSError("quota exceeded")


def snapshot(data, version=1):
    return {"version": version, "data": data}


class TestSavePersistedState(unittest.TestCase):
    def test_writes_versioned_payload(self):
        storage = MemoryStorage()
        state = PersistedState(
            selected_color="red",
            last_game_config=DifficultyConfig(Difficulty("Easy", 6, 6, 15, "classic")),
            custom_settings=CustomGameSettings("maze", 12, True, 30),
        )
        save_persisted_state(state, storage)

        payload = json.loads(storage.items[STORAGE_KEY])
        self.assertEqual(
            payload,
            {
                "version": 1,
                "data": {
                    "selectedColor": "red",
                    "lastGameConfig": {
                        "type": "difficulty",
                        "difficulty": {
                            "name": "Easy",
                            "rows": 6,
                            "columns": 6,
                            "maxSteps": 15,
                            "mode": "classic",
                        },
                    },
                    "customSettings": {
                        "gameMode": "maze",
                        "boardSize": 12,
                        "customMoveLimit": True,
                        "moveLimit": 30,
                    },
                },
            },
        )

    def test_optional_difficulty_fields_omitted(self):
        state = PersistedState(last_game_config=DifficultyConfig(Difficulty("Legacy", 8, 8)))
        payload = to_snapshot(state)
        self.assertEqual(
            payload["data"]["lastGameConfig"]["difficulty"],
            {"name": "Legacy", "rows": 8, "columns": 8},
        )
        self.assertIsNone(to_snapshot(PersistedState())["data"]["lastGameConfig"])

    def test_failing_storage_is_ignored(self):
        save_persisted_state(PersistedState(), FailingStorage())
        save_persisted_state(PersistedState(), None)


class TestLoadPersistedState(unittest.TestCase):
    def test_missing_storage_or_value(self):
        self.assertIsNone(load_persisted_state(None))
        self.assertIsNone(load_persisted_state(MemoryStorage()))
        storage = MemoryStorage()
        storage.set_item(STORAGE_KEY, "")
        self.assertIsNone(load_persisted_state(storage))

    def test_malformed_json_returns_none(self):
        storage = MemoryStorage()
        storage.set_item(STORAGE_KEY, "{not-json")
        self.assertIsNone(load_persisted_state(storage))

    def test_failing_storage_returns_none(self):
        self.assertIsNone(load_persisted_state(FailingStorage()))

    def test_round_trip(self):
        storage = MemoryStorage()
        state = PersistedState(
            selected_color="purple",
            last_game_config=CustomConfig(CustomGameSettings("maze", 15, False, 20)),
            custom_settings=CustomGameSettings("maze", 15, False, 20),
        )
        save_persisted_state(state, storage)
        self.assertEqual(load_persisted_state(storage), state)

    def test_clamps_invalid_values(self):
        storage = MemoryStorage()
        storage.set_item(
            STORAGE_KEY,
            json.dumps(
                snapshot(
                    {
                        "selectedColor": "red",
                        "lastGameConfig": {
                            "type": "custom",
                            "settings": {
                                "gameMode": "classic",
                                "boardSize": 100,
                                "customMoveLimit": True,
                                "moveLimit": 999,
                            },
                        },
                        "customSettings": {
                            "gameMode": "maze",
                            "boardSize": 1,
                            "customMoveLimit": False,
                            "moveLimit": 1000,
                        },
                    }
                )
            ),
        )
        state = load_persisted_state(storage)
        self.assertEqual(state.selected_color, "red")
        self.assertEqual(
            state.last_game_config,
            CustomConfig(CustomGameSettings("classic", 25, True, 100)),
        )
        self.assertEqual(state.custom_settings, CustomGameSettings("maze", 5, False, 100))

    def test_clamps_difficulty(self):
        state = sanitize_persisted_snapshot(
            snapshot(
                {
                    "selectedColor": "blue",
                    "lastGameConfig": {
                        "type": "difficulty",
                        "difficulty": {
                            "name": "",
                            "rows": -5,
                            "columns": 100,
                            "maxSteps": 9999,
                            "mode": "maze",
                        },
                    },
                }
            )
        )
        self.assertEqual(
            state.last_game_config,
            DifficultyConfig(Difficulty("Custom", 1, 25, 500, "maze")),
        )
        self.assertEqual(state.custom_settings, CustomGameSettings())

    def test_wrong_version_rejected(self):
        self.assertIsNone(sanitize_persisted_snapshot(snapshot({}, version=2)))
        self.assertIsNone(sanitize_persisted_snapshot(snapshot({}, version=True)))
        self.assertIsNone(sanitize_persisted_snapshot({"data": {}}))
        self.assertIsNone(sanitize_persisted_snapshot([1, 2, 3]))
        self.assertIsNone(sanitize_persisted_snapshot(snapshot("oops")))

    def test_unknown_values_fall_back(self):
        state = sanitize_persisted_snapshot(
            snapshot(
                {
                    "selectedColor": "magenta",
                    "lastGameConfig": {"type": "tournament"},
                    "customSettings": {
                        "gameMode": "spiral",
                        "boardSize": "12",
                        "customMoveLimit": 1,
                        "moveLimit": None,
                    },
                }
            )
        )
        self.assertEqual(state.selected_color, "")
        self.assertIsNone(state.last_game_config)
        self.assertEqual(state.custom_settings, CustomGameSettings("classic", 12, True, 20))

    def test_non_numeric_and_fractional_values(self):
        state = sanitize_persisted_snapshot(
            snapshot(
                {
                    "customSettings": {
                        "boardSize": 12.9,
                        "moveLimit": "lots",
                    },
                    "lastGameConfig": {
                        "type": "difficulty",
                        "difficulty": {"name": "Odd", "rows": "nan", "columns": 7, "mode": "hexagon"},
                    },
                }
            )
        )
        self.assertEqual(state.custom_settings, CustomGameSettings("classic", 12, False, 20))
        self.assertEqual(
            state.last_game_config,
            DifficultyConfig(Difficulty("Odd", 10, 7, 0, None)),
        )

    def test_null_numbers_use_defaults_not_minimums(self):
        state = sanitize_persisted_snapshot(
            snapshot(
                {
                    "customSettings": {"boardSize": None, "moveLimit": None},
                    "lastGameConfig": {
                        "type": "difficulty",
                        "difficulty": {"name": "Null", "rows": None, "columns": None, "maxSteps": None},
                    },
                }
            )
        )
        self.assertEqual(state.custom_settings, CustomGameSettings("classic", 10, False, 20))
        self.assertEqual(state.last_game_config, DifficultyConfig(Difficulty("Null", 10, 10, 0, None)))

    def test_difficulty_config_without_payload_dropped(self):
        state = sanitize_persisted_snapshot(snapshot({"lastGameConfig": {"type": "difficulty"}}))
        self.assertIsNone(state.last_game_config)


class TestFileStorage(unittest.TestCase):
    def test_round_trip_on_disk(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = FileStorage(Path(tmpdir) / "state")
            self.assertIsNone(storage.get_item(STORAGE_KEY))

            state = PersistedState(selected_color="green")
            save_persisted_state(state, storage)

            path = storage.path_for(STORAGE_KEY)
            self.assertTrue(path.exists())
            self.assertFalse(path.with_name(path.name + ".tmp").exists())
            self.assertEqual(json.loads(path.read_text(encoding="utf-8"))["version"], 1)
            self.assertEqual(load_persisted_state(FileStorage(Path(tmpdir) / "state")), state)

    def test_corrupt_file_ignored(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            storage = FileStorage(Path(tmpdir))
            storage.path_for(STORAGE_KEY).write_text("[[[", encoding="utf-8")
            self.assertIsNone(load_persisted_state(storage))


if __name__ == "__main__":
    unittest.main()
