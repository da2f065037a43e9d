"""Settings for CursorCommander.

Values are read, highest priority first, from constructor arguments,
``CURSORCOMMANDER_*`` environment variables and ``~/.CursorCommander/config.json``.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from CursorCommander.models import TargetIdentity, Timings

_CONFIG_DIR_ENV = "CURSORCOMMANDER_CONFIG_DIR"


def get_config_dir() -> Path:
    override = os.environ.get(_CONFIG_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".CursorCommander"


def get_config_path() -> Path:
    return get_config_dir() / "config.json"


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(env_prefix="CURSORCOMMANDER_", extra="ignore")

    # Target application
    target_name: str = Field(default="Cursor", description="Display name of the target app")
    target_bundle_id: str = Field(default="io.cursor.Cursor")
    target_url_scheme: str = Field(default="cursor://")
    target_install_paths: tuple[str, ...] = Field(default=TargetIdentity().install_paths)

    # Panel choreography
    palette_filter_text: str = Field(
        default="chat", description="Typed into the command palette to reach the chat panel"
    )
    composer_bottom_offset: float = Field(
        default=30.0, description="Pixels above the window's bottom edge where the composer sits"
    )

    # Delays (seconds)
    activation_delay: float = 0.5
    restore_delay: float = 0.5
    palette_delay: float = 0.3
    filter_delay: float = 0.3
    confirm_delay: float = 0.5
    toggle_delay: float = 0.5
    click_delay: float = 0.2
    panel_settle_delay: float = 0.5
    key_event_delay: float = 0.02
    char_delay: float = 0.03
    mouse_event_delay: float = 0.05
    triple_click_delay: float = 0.02
    clear_delay: float = 0.05
    submit_delay: float = 0.2

    # Scheduling
    script_timeout: float = Field(default=15.0, description="Upper bound for one osascript run")
    permission_recheck_delay: float = 1.0
    launch_recheck_delay: float = 2.0
    permission_poll_interval: float = 5.0
    running_poll_interval: float = 3.0

    # History / logging
    history_size: int = 20
    log_level: str = "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            JsonConfigSettingsSource(settings_cls, json_file=get_config_path()),
        )

    def target(self) -> TargetIdentity:
        return TargetIdentity(
            name=self.target_name,
            bundle_id=self.target_bundle_id,
            url_scheme=self.target_url_scheme,
            install_paths=tuple(self.target_install_paths),
        )

    def timings(self) -> Timings:
        return Timings(
            activation_delay=self.activation_delay,
            restore_delay=self.restore_delay,
            palette_delay=self.palette_delay,
            filter_delay=self.filter_delay,
            confirm_delay=self.confirm_delay,
            toggle_delay=self.toggle_delay,
            click_delay=self.click_delay,
            panel_settle_delay=self.panel_settle_delay,
            key_event_delay=self.key_event_delay,
            char_delay=self.char_delay,
            mouse_event_delay=self.mouse_event_delay,
            triple_click_delay=self.triple_click_delay,
            clear_delay=self.clear_delay,
            submit_delay=self.submit_delay,
        )


@lru_cache(maxsize=1)
def _cached_settings() -> Settings:
    return Settings()


def get_settings(force_reload: bool = False) -> Settings:
    """Return the process-wide Settings, reloading on request."""
    if force_reload:
        _cached_settings.cache_clear()
    return _cached_settings()
