"""XDG path helpers for settings and runtime state."""

from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs

APP_NAME = "lazydir"
APP_AUTHOR = "lazydir"


def dirs() -> PlatformDirs:
    return PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR, roaming=False)


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def config_root() -> Path:
    return ensure_dir(Path(dirs().user_config_path))


def state_root() -> Path:
    return ensure_dir(Path(dirs().user_state_path))


def settings_path() -> Path:
    return config_root() / "settings.json"


def default_log_path() -> Path:
    return state_root() / "logs" / "lazydir.runtime.jsonl"
