import os
from pathlib import Path
from typing import Optional

import yaml

from prledger_core.utils.paths import DEFAULT_PATH_FILTERS

DEFAULT_CONFIG: dict = {
    "model": "openai",  # provider: "openai" | "anthropic"
    "model_name": None,  # review model; None = provider default (OpenAIBot.MODEL / AnthropicBot.MODEL)
    "light_model_name": None,  # summary model; None = same as model_name
    "temperature": None,  # None = provider default
    "retries": 3,
    "timeout_ms": 120000,
    "api_base_url": None,
    "system_message": None,  # None = built-in reviewer persona
    "max_files": 150,
    "max_chars_per_file": 20000,
    "path_filters": list(DEFAULT_PATH_FILTERS),  # "!" prefix excludes, e.g. "!**/*.lock"
    "review_comment_lgtm": False,
    "disable_review": False,
    "disable_release_notes": False,
    "review_draft_prs": False,
    "bot_mention": "@openai",
    "debug": False,
}


def load_config(config_path: str = ".prledger.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prledger.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "path_filters": list(DEFAULT_CONFIG["path_filters"])}

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
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")

    return config


def load_system_message(config: dict) -> Optional[str]:
    """
    Resolve the system message.

    ``system_message`` may be inline text or a path to a file (relative to cwd).
    Returns None when unset so the provider falls back to its built-in persona.
    """
    value = config.get("system_message")
    if not value:
        return None
    p = Path(value)
    if len(value) < 256 and "\n" not in value and p.suffix in (".md", ".txt"):
        if not p.exists():
            raise FileNotFoundError(f"System message file not found: {value}")
        return p.read_text()
    return value
