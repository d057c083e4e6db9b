import logging
from typing import Literal

from pydantic import BaseModel, ValidationError, field_validator


class SettingsSchema(BaseModel):
    seed_default_exercises: bool = True
    log_level: str = "INFO"
    export_filename: str = "workout-data.csv"
    default_timeframe: Literal["week", "month", "all"] = "all"
    host: str = "127.0.0.1"
    port: int = 8000

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level

    @field_validator("port")
    @classmethod
    def _valid_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError("port must be between 1 and 65535")
        return value


def validate_settings(data: dict) -> SettingsSchema:
    try:
        return SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
