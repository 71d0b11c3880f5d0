"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use RUCKSACK_ prefix (e.g., RUCKSACK_ROOT_PREFIX=assets).

Settings can also be loaded from a .env file in the project root.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use RUCKSACK_ prefix.

    Examples:
        RUCKSACK_ROOT_PREFIX=/srv/game/assets
        RUCKSACK_DEBUG_MODE=true
        RUCKSACK_PATH_MAX=1024
    """

    model_config = SettingsConfigDict(
        env_prefix="RUCKSACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Path configuration
    root_prefix: str = Field(
        default=".",
        description="Directory that relative manifest paths are resolved against",
    )

    path_max: int = Field(
        default=4096,
        gt=0,
        description="Maximum length of a resolved path; longer paths are rejected",
    )

    # Reader / tokenizer configuration
    read_chunk_size: int = Field(
        default=16384,
        gt=0,
        description="Number of bytes read from the manifest stream per chunk",
    )

    max_value_size: int = Field(
        default=16384,
        gt=0,
        description="Longest string, number or key the tokenizer accepts",
    )

    max_depth: int = Field(
        default=64,
        gt=0,
        description="Deepest object/array nesting the tokenizer accepts",
    )

    # Output configuration
    bundle_file: str = Field(
        default="bundle.json",
        description="Default build plan filename written into the output directory",
    )

    debug_mode: bool = Field(
        default=False,
        description="Trace every manifest event and state transition",
    )


# Singleton instance - import this in your code
appsettings = AppSettings()
