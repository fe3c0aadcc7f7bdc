"""Configuration management using TOML + environment variables."""

from __future__ import annotations

import os
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]

import tomli_w

CONFIG_DIR = Path.home() / ".config" / "atuin-fzf"
CONFIG_FILE = CONFIG_DIR / "config.toml"

DEFAULT_HEADER = "[Enter] to select, [Ctrl-Y] to yank."


@dataclass
class BackendConfig:
    executable: str = "atuin"
    search_limit: int = 1000
    related_limit: int = 5


@dataclass
class SelectorConfig:
    executable: str = "fzf"
    prompt: str = "> "
    header: str = DEFAULT_HEADER
    scheme: str = "history"
    preview_window: str = "right:40%:wrap"
    height: str = "80%"
    # Empty means detect one at startup
    clipboard_command: str = ""
    # fzf: 1 = no match, 130 = interrupted (Esc, Ctrl-C, the yank binding)
    abort_exit_codes: list[int] = field(default_factory=lambda: [1, 130])


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    file: str = ""


@dataclass
class AppConfig:
    backend: BackendConfig = field(default_factory=BackendConfig)
    selector: SelectorConfig = field(default_factory=SelectorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file with env var overrides.

    A missing file is not an error; the defaults describe the stock atuin
    and fzf setup.
    """
    config = AppConfig()
    config_file = path or CONFIG_FILE

    if config_file.exists():
        with open(config_file, "rb") as f:
            data = tomllib.load(f)

        backend = data.get("backend", {})
        config.backend.executable = backend.get("executable", config.backend.executable)
        config.backend.search_limit = backend.get("search_limit", config.backend.search_limit)
        config.backend.related_limit = backend.get("related_limit", config.backend.related_limit)

        selector = data.get("selector", {})
        config.selector.executable = selector.get("executable", config.selector.executable)
        config.selector.prompt = selector.get("prompt", config.selector.prompt)
        config.selector.header = selector.get("header", config.selector.header)
        config.selector.scheme = selector.get("scheme", config.selector.scheme)
        config.selector.preview_window = selector.get("preview_window", config.selector.preview_window)
        config.selector.height = selector.get("height", config.selector.height)
        config.selector.clipboard_command = selector.get("clipboard_command", config.selector.clipboard_command)
        config.selector.abort_exit_codes = selector.get("abort_exit_codes", config.selector.abort_exit_codes)

        logging_cfg = data.get("logging", {})
        config.logging.level = logging_cfg.get("level", config.logging.level)
        config.logging.file = logging_cfg.get("file", config.logging.file)

    # Environment variable overrides
    if env_backend := os.environ.get("ATUIN_FZF_BACKEND"):
        config.backend.executable = env_backend
    if env_limit := os.environ.get("ATUIN_FZF_SEARCH_LIMIT"):
        config.backend.search_limit = int(env_limit)
    if env_selector := os.environ.get("ATUIN_FZF_SELECTOR"):
        config.selector.executable = env_selector
    if env_clipboard := os.environ.get("ATUIN_FZF_CLIPBOARD"):
        config.selector.clipboard_command = env_clipboard
    if env_log_level := os.environ.get("ATUIN_FZF_LOG_LEVEL"):
        config.logging.level = env_log_level
    if env_log_file := os.environ.get("ATUIN_FZF_LOG_FILE"):
        config.logging.file = env_log_file

    return config


def config_to_dict(config: AppConfig) -> dict:
    return asdict(config)


def dump_config(config: AppConfig) -> str:
    """Render the effective configuration as TOML."""
    return tomli_w.dumps(config_to_dict(config))
