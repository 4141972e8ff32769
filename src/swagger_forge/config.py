"""Configuration management for swagger-forge."""

import json
import re
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PathReplacement(BaseModel):
    """A regex substitution applied to route paths before they are documented."""

    replace_in: Literal["endpoints", "groups", "all"] = Field(default="all", description="Where the replacement applies.")
    pattern: str = Field(..., description="Regular expression matched against the path.")
    replacement: str = Field(default="", description="Replacement text, may use group references.")

    @field_validator("pattern")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid pattern: {e}") from e
        return value


class BuilderSettings(BaseModel):
    """Options that drive schema translation and path assembly for one document build."""

    x_properties: bool = Field(default=True, description="Mirror extended constraints into x-* vendor extensions.")
    reuse_definitions: bool = Field(default=True, description="Reuse an existing definition when an identical schema is appended.")
    definition_prefix: Literal["default", "useLabel"] = Field(default="default", description="Naming policy for colliding definition names.")
    payload_type: Literal["json", "form"] = Field(default="json", description="Default payload style for endpoints that do not set one.")
    accept_to_produce: bool = Field(default=True, description="Turn an enumerated 'accept' header into the produces list.")
    consumes: Optional[List[str]] = Field(default=None, description="Document-wide consumes override.")
    produces: Optional[List[str]] = Field(default=None, description="Document-wide produces override.")

    base_path: str = Field(default="/", description="Base path stripped from every route path.")
    path_prefix_size: int = Field(default=1, ge=1, description="Number of leading path segments used as the group name.")
    path_replacements: List[PathReplacement] = Field(default_factory=list)
    grouping: Literal["path", "tags"] = Field(default="path", description="Source of operation tags.")
    tags_grouping_exclude: List[str] = Field(default_factory=lambda: ["api"], description="Endpoint tags hidden when grouping by tags.")

    de_reference: bool = Field(default=False, description="Inline every $ref and drop the definition sections.")


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format")
    file: Optional[Path] = Field(default=None, description="Log file path")


class Config(BaseSettings):
    """Main configuration for swagger-forge. Loads from environment variables prefixed with SWAGGER_FORGE_."""

    model_config = SettingsConfigDict(
        env_prefix="SWAGGER_FORGE_",
        env_nested_delimiter="__",  # e.g., SWAGGER_FORGE_BUILDER__BASE_PATH
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    builder: BuilderSettings = Field(default_factory=BuilderSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, file_path: Path) -> "Config":
        """Create configuration strictly from a JSON file.
        Environment variables are not layered on top.
        """
        with open(file_path) as f:
            config_data = json.load(f)
        return cls.model_validate(config_data)
