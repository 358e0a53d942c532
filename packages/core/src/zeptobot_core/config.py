import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from zeptobot_core.errors import ConfigurationError

DEFAULT_CONFIG: dict = {
    "repo": "JuliaLang/METADATA.jl",
    "api_url": "https://api.github.com",
    "log_dir": None,  # None = webhook runs log to stderr only
    "dry_run": False,
}


def load_config(config_path: str = ".zeptobot.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .zeptobot.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["github_username"] = os.environ.get("GITHUB_USERNAME")
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    if not config.get("log_dir"):
        config["log_dir"] = os.environ.get("ZEPTO_LOGDIR")

    return config


@dataclass(frozen=True)
class BotConfig:
    """Identity and target of one bot process.

    Built once at startup and handed to every component that talks to GitHub.
    """

    username: str
    token: str
    repo: str
    api_url: str = DEFAULT_CONFIG["api_url"]

    @classmethod
    def from_config(cls, config: dict) -> "BotConfig":
        username = config.get("github_username")
        token = config.get("github_token")
        if not username:
            raise ConfigurationError("No GitHub username configured. Set GITHUB_USERNAME.")
        if not token:
            raise ConfigurationError("No GitHub token configured. Set GITHUB_TOKEN.")
        return cls(
            username=username,
            token=token,
            repo=config.get("repo") or DEFAULT_CONFIG["repo"],
            api_url=(config.get("api_url") or DEFAULT_CONFIG["api_url"]).rstrip("/"),
        )
