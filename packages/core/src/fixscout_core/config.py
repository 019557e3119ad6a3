import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from fixscout_core.lookups import REPO_MAINTAINERS, SDK_REPOSITORIES, with_extra_maintainers, with_extra_repositories

DEFAULT_CONFIG: dict = {
    "model": "anthropic",
    "batch_size": 5,  # releases per release-note scan batch
    "max_releases": 100,  # above this the reported version is "too old" to scan
    "max_high_candidates": 3,
    "max_medium_candidates": 5,
    "displayed_medium_candidates": 3,
    "sdk_repositories": {},  # extra alias -> "owner/name" entries
    "maintainers": {},  # extra "owner/name" -> ["@group", ...] entries
}


@dataclass(frozen=True)
class AnalysisSettings:
    """Per-run policy handed to the pipeline stages."""

    batch_size: int = 5
    max_releases: int = 100
    max_high_candidates: int = 3
    max_medium_candidates: int = 5
    displayed_medium_candidates: int = 3
    sdk_repositories: Mapping[str, str] = field(default_factory=lambda: SDK_REPOSITORIES)
    maintainers: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: REPO_MAINTAINERS)


def load_config(config_path: str = ".fixscout.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .fixscout.yml in the current directory
      3. CLI argument overrides
    """
    config = {
        **DEFAULT_CONFIG,
        "sdk_repositories": dict(DEFAULT_CONFIG["sdk_repositories"]),
        "maintainers": dict(DEFAULT_CONFIG["maintainers"]),
    }

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Credentials only ever come from the environment
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")
    config["slack_bot_token"] = os.environ.get("SLACK_BOT_TOKEN")

    return config


def build_settings(config: dict) -> AnalysisSettings:
    """Turn a loaded config dict into the frozen settings object used by a run."""
    batch_size = int(config.get("batch_size", DEFAULT_CONFIG["batch_size"]))
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")
    return AnalysisSettings(
        batch_size=batch_size,
        max_releases=int(config.get("max_releases", DEFAULT_CONFIG["max_releases"])),
        max_high_candidates=int(config.get("max_high_candidates", DEFAULT_CONFIG["max_high_candidates"])),
        max_medium_candidates=int(config.get("max_medium_candidates", DEFAULT_CONFIG["max_medium_candidates"])),
        displayed_medium_candidates=int(
            config.get("displayed_medium_candidates", DEFAULT_CONFIG["displayed_medium_candidates"])
        ),
        sdk_repositories=with_extra_repositories(config.get("sdk_repositories")),
        maintainers=with_extra_maintainers(config.get("maintainers")),
    )
