"""Settings resolution with named profile support."""

import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import NoReturn

import tomlkit
import typer
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

CONFIG_PATH = Path.home() / ".config" / "copilot-work" / "config.toml"

GITHUB_AUTH_MODES = ("gh-cli", "token")


class CopilotWorkSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="COPILOT_WORK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_profile: str | None = None  # profile name

    # Backend
    github_auth: str = "gh-cli"  # "gh-cli" | "token"
    github_token: SecretStr | None = None
    github_api_url: str = "https://api.github.com"

    # Issue fan-out
    issue_title: str = "Copilot Request"
    assignee: str = "@copilot"

    # find-prs
    pr_repo_count: int = Field(default=10, ge=1)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Profile values arrive as init kwargs; env vars and .env must win over them
        return env_settings, dotenv_settings, init_settings, file_secret_settings


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/copilot-work/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    return tomlkit.load(CONFIG_PATH.open())


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def _fail(message: str) -> NoReturn:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


def get_settings(profile: str | None = None) -> CopilotWorkSettings:
    """Resolve the active profile and return a fully populated CopilotWorkSettings.

    Profile precedence (highest to lowest):
    1. profile argument (--profile CLI flag)
    2. COPILOT_WORK_DEFAULT_PROFILE env var
    3. default_profile key in ~/.config/copilot-work/config.toml
    4. First profile defined in the config file

    With no profile at all, settings come from env vars, .env and defaults.
    """
    toml_config = _load_toml()

    active = (
        profile
        or os.environ.get("COPILOT_WORK_DEFAULT_PROFILE")
        or toml_config.get("default_profile")
        or ((_profiles := _list_profiles(toml_config)) and _profiles[0] or None)
    )

    profile_defaults: dict = {}
    if active:
        if active in toml_config and isinstance(toml_config[active], Mapping):
            profile_defaults = dict(toml_config[active])
        else:
            profiles = _list_profiles(toml_config)
            _fail(f"Profile '{active}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")

    # env vars + .env always override profile defaults
    settings = CopilotWorkSettings(**profile_defaults)

    if settings.github_auth not in GITHUB_AUTH_MODES:
        _fail(f"Unknown github_auth '{settings.github_auth}'. Valid: {', '.join(GITHUB_AUTH_MODES)}")
    if settings.github_auth == "token" and not settings.github_token:
        _fail(
            "Missing GitHub credentials. Set COPILOT_WORK_GITHUB_TOKEN or "
            f"github_token in the [{active or 'profile'}] section of {CONFIG_PATH}, "
            'or set github_auth = "gh-cli" to use the gh CLI.'
        )

    return settings
