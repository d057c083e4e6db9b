import os
import yaml

APP_VERSION = "1.0.0"


class YamlConfig:
    """Tracker settings stored as YAML.

    The file is ``settings.yaml`` unless ``WORKOUT_SETTINGS`` names another.
    """

    ENV_VAR = "WORKOUT_SETTINGS"

    def __init__(self, path: str | None = None) -> None:
        self.path = path or os.environ.get(self.ENV_VAR, "settings.yaml")

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} must contain a mapping")
        return data

    def save(self, data: dict) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(dict(data), f)
