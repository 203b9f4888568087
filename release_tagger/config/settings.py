"""
Configuration system using Pydantic for type-safe settings management.

Settings come from three places, later ones winning: ``RELEASE_TAGGER_*``
environment variables, an optional YAML file, and explicit values (CLI
options / GitHub Actions inputs).
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from release_tagger.engine.tag_applier import DEFAULT_COMMENT_TEMPLATE
from release_tagger.exceptions import ConfigurationError
from release_tagger.providers.clickup_rest import DEFAULT_CLICKUP_API_URL


class TaggerSettings(BaseSettings):
    """Settings for one release tagging run."""

    model_config = SettingsConfigDict(
        env_prefix="RELEASE_TAGGER_",
        case_sensitive=False,
    )

    github_token: SecretStr = Field(..., description="Token for reading releases, commits and PRs")
    clickup_api_key: SecretStr | None = Field(
        default=None, description="ClickUp API token (required unless running dry)"
    )
    tag_prefix: str = Field(default="", description="Prepended to the release label before sanitizing")
    include_previous_release: bool = Field(
        default=False, description="Tag everything since the previous release, not just the tagged commit"
    )
    release_name: str | None = Field(default=None, description="Overrides the label derived from the event")
    repository: str | None = Field(default=None, description="owner/name; defaults to the event payload")
    github_api_url: str = Field(default="https://api.github.com", description="GitHub API base URL")
    clickup_api_url: str = Field(default=DEFAULT_CLICKUP_API_URL, description="ClickUp API v2 base URL")
    max_commits: int = Field(default=100, ge=1, le=100, description="Commits read in branch/fallback mode")
    release_page_size: int = Field(default=100, ge=1, le=100, description="Releases scanned for the previous one")
    comment_template: str = Field(
        default=DEFAULT_COMMENT_TEMPLATE, description="Comment text; {release} is the raw release label"
    )

    @field_validator("repository")
    @classmethod
    def validate_repository(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        owner, _, name = value.partition("/")
        if not owner or not name or "/" in name:
            raise ValueError(f"repository must look like 'owner/name', got: {value}")
        return value

    @field_validator("comment_template")
    @classmethod
    def validate_comment_template(cls, value: str) -> str:
        try:
            value.format(release="v0.0.0")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"comment_template may only use the {{release}} placeholder: {e}") from e
        return value

    @property
    def repository_parts(self) -> tuple[str, str] | None:
        """(owner, name) when a repository is configured."""
        if not self.repository:
            return None
        owner, _, name = self.repository.partition("/")
        return owner, name

    @classmethod
    def load(cls, config_path: str | None = None, **overrides: Any) -> TaggerSettings:
        """Build settings from an optional YAML file plus explicit overrides.

        Overrides that are None are ignored so unset CLI options do not mask
        file or environment values.

        Raises:
            ConfigurationError: If the file is invalid or validation fails
        """
        data: dict[str, Any] = cls._read_yaml(config_path) if config_path else {}
        data.update({key: value for key, value in overrides.items() if value is not None})

        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @classmethod
    def from_yaml(cls, config_path: str) -> TaggerSettings:
        """Load settings from YAML file with environment variable interpolation.

        Raises:
            ConfigurationError: If config file is invalid or missing required fields
        """
        return cls.load(config_path)

    @classmethod
    def _read_yaml(cls, config_path: str) -> dict[str, Any]:
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            yaml_content = config_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if config_dict is None:
            return {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")
        # YAML files use the action's input spelling (tag-prefix) as well as field names
        return {str(key).replace("-", "_"): value for key, value in config_dict.items()}

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        Supports ``${VAR_NAME}`` (required) and ``${VAR_NAME:-default}``.
        YAML comment lines are left unchanged.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))
