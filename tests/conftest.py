import json
import os
import tempfile
from pathlib import Path

import pytest

TEST_RUNTIME_DIR = tempfile.mkdtemp(prefix="journal_test_")

os.environ.setdefault("JOURNAL_DATA_DIR", os.path.join(TEST_RUNTIME_DIR, "data"))
os.environ.setdefault("JOURNAL_CONFIG_DIR", os.path.join(TEST_RUNTIME_DIR, "configs"))
os.environ.pop("OPENROUTER_API_KEY", None)


def make_config(app_id: str = "social", **overrides):
    config = {
        "appId": app_id,
        "appName": f"{app_id.title()} Journal",
        "interactions": [
            {"id": "initiated", "label": "Initiated Conversation", "icon": "💬"},
            {"id": "met-new", "label": "Met New Person", "icon": "🤝"},
        ],
        "comfortLevels": [
            {"id": "comfortable", "label": "Comfortable", "color": "bg-green-300"},
            {"id": "neutral", "label": "Neutral", "color": "bg-gray-300"},
        ],
        "theme": {"primary": "blue-600", "secondary": "purple-600"},
    }
    config.update(overrides)
    return config


def write_config(directory: Path, config, name: str | None = None) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name or config['appId']}.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    return path


def write_users(path: Path, users: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(users), encoding="utf-8")


@pytest.fixture
def config_dir(tmp_path) -> Path:
    directory = tmp_path / "configs"
    write_config(directory, make_config("social"))
    return directory
