"""Configuration management for git-releasenotes."""

import json
import os
from pathlib import Path
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_API_URL = "https://api.github.com"


class Config(BaseSettings):
    """Configuration settings for git-releasenotes."""

    model_config = SettingsConfigDict(
        env_prefix="RELNOTES_",
        case_sensitive=False,
        extra="ignore",
    )

    github_token: Optional[str] = None
    github_api_url: str = DEFAULT_API_URL
    github_repo: Optional[str] = None
    request_timeout: float = 10.0
    search_workers: int = 4
    resolve_timeout: Optional[float] = None
    bot_authors: List[str] = ["dependabot"]
    skip_subjects: List[str] = ["setting new snapshot version"]
    include_author: bool = True
    enrich_merge_titles: bool = True
    fetch_tags: bool = True
    require_clean_worktree: bool = True
    config_file: Optional[str] = None

    @field_validator('github_api_url')
    @classmethod
    def normalize_api_url(cls, v):
        """Ensure the API URL has a protocol and no trailing slash."""
        if v and not v.startswith(('http://', 'https://')):
            v = f"https://{v}"
        return v.rstrip('/')

    @field_validator('search_workers')
    @classmethod
    def check_search_workers(cls, v):
        if v < 1:
            raise ValueError("search_workers must be at least 1")
        return v

    @property
    def has_token(self) -> bool:
        return bool(self.github_token)


def load_json_config(config_path: str) -> dict:
    """Load configuration from JSON file.

    Args:
        config_path: Path to JSON configuration file

    Returns:
        Configuration dictionary
    """
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        raise ValueError(f"Error loading config file {config_path}: {e}")


def find_config_file() -> Optional[str]:
    """Find configuration file in common locations.

    Returns:
        Path to config file or None if not found
    """
    search_paths = [
        ".releasenotes.json",
        "~/.releasenotes.json",
        "~/.config/git-releasenotes/config.json",
    ]

    for path_str in search_paths:
        path = Path(path_str).expanduser()
        if path.exists() and path.is_file():
            return str(path)

    return None


def get_config(config_file: Optional[str] = None) -> Config:
    """Load configuration from environment variables and/or JSON file.

    An explicitly given ``config_file`` must be readable; a discovered one
    is skipped when broken.

    Args:
        config_file: Optional path to JSON config file

    Returns:
        Configuration object
    """
    config_data = {}

    json_config_path = config_file or find_config_file()
    if json_config_path:
        try:
            config_data.update(load_json_config(json_config_path))
        except ValueError:
            if config_file:
                raise
        config_data['config_file'] = json_config_path

    # Environment variables override JSON config
    env_config = {
        'github_token': os.getenv('GITHUB_TOKEN'),
        'github_repo': os.getenv('RELNOTES_GITHUB_REPO'),
        'github_api_url': os.getenv('RELNOTES_GITHUB_API_URL'),
    }

    env_config = {k: v for k, v in env_config.items() if v}
    config_data.update(env_config)

    return Config(**config_data)
