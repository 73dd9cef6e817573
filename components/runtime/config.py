# ==========================================
# CONFIGURATION
# ==========================================
import json
import os

from pydantic import BaseModel, ValidationError

from components.console import warn

SETTINGS_FILE = "notecomp.json"
SETTINGS_PATHS = [SETTINGS_FILE, os.path.join("~", ".notecomp", "settings.json")]


class Settings(BaseModel):
    """User settings: the only state persisted across restarts."""
    template_folder: str = ""
    auto_refresh: bool = True
    refresh_delay: float = 2.0


def load_settings(path=None):
    """Load settings from the first settings file found, merged over the defaults."""
    paths = [path] if path else SETTINGS_PATHS
    for p in paths:
        p = os.path.expanduser(p)
        if not os.path.exists(p):
            continue
        try:
            with open(p, "r") as f:
                data = json.load(f)
            return Settings(**{**Settings().model_dump(), **data})
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            warn(f"Ignoring invalid settings file {p}: {e}")
            break
    return Settings()


def save_settings(settings, path=SETTINGS_FILE):
    path = os.path.expanduser(path)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w") as f:
        json.dump(settings.model_dump(), f, indent=2)
    return path
