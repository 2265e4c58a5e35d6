from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Self

import yaml
from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, model_validator

from code_to_prompt.config import DEFAULT_CONCURRENCY, DEFAULT_CONFIG, OutputFormat
from code_to_prompt.exceptions import ConfigFileError, ConflictingOptionsError
from code_to_prompt.logging import DebugLogger, logger

ENV_FILE = find_dotenv(usecwd=True)

CONFIG_APP_DIR = "code-to-prompt"
CONFIG_FILENAME = "config.json"


class Settings(BaseModel):
    """Configuration settings for one code_to_prompt run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    paths: list[str] = Field(default_factory=list, description="Input files or directories.")
    config: Path | None = Field(default=None, description="Configuration file.")
    extension: list[str] = Field(default_factory=list, description="File extensions to include.")
    include_hidden: bool = Field(default=False, description="Include hidden files/folders.")
    include_binary: bool = Field(default=False, description="Include binary files.")
    ignore_files_only: bool = Field(default=False, description="--ignore only ignores files.")
    ignore_gitignore: bool = Field(default=False, description="Ignore .gitignore files.")
    ignore: list[str] = Field(default_factory=list, description="Glob patterns to ignore.")
    output: Path | None = Field(default=None, description="Output to file.")
    cxml: bool = Field(default=False, description="Claude XML format.")
    markdown: bool = Field(default=False, description="Markdown format.")
    line_numbers: bool = Field(default=False, description="Add line numbers.")
    clipboard: bool = Field(default=False, description="Copy output to clipboard.")
    null: bool = Field(default=False, description="Use NUL separator for stdin.")
    tree: bool = Field(default=False, description="Generate file tree at top.")
    add_to_tree: list[str] = Field(
        default_factory=list,
        description="Paths shown in the file tree only, without exporting their contents.",
    )
    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1, description="Concurrent filesystem operations.")
    verbose: bool = Field(default=False, description="Enable verbose debug logging.")
    log_file: str = Field(default="", description="Log file path.")

    @model_validator(mode="after")
    def check_exclusive_options(self) -> Self:
        """Reject option pairs that cannot be honored together.

        Raises:
            ConflictingOptionsError: if clipboard and output, or cxml and markdown, are both set.

        Returns:
            Self: the validated settings
        """
        if self.clipboard and self.output:
            raise ConflictingOptionsError(first="--clipboard (-C)", second="--output (-o)")
        if self.cxml and self.markdown:
            raise ConflictingOptionsError(first="--cxml", second="--markdown")
        return self

    @property
    def output_format(self) -> OutputFormat:
        if self.cxml:
            return OutputFormat.CXML
        if self.markdown:
            return OutputFormat.MARKDOWN
        return OutputFormat.DEFAULT


def environment() -> dict[str, str]:
    """Merge variables from the nearest `.env` file under the process environment.

    Returns:
        dict[str, str]: the merged variables, process values taking precedence
    """
    env: dict[str, str] = {}
    if ENV_FILE:
        env.update({k: v for k, v in dotenv_values(ENV_FILE).items() if v is not None})
    env.update(os.environ)
    return env


def get_xdg_config_path(env: dict[str, str] | None = None) -> Path:
    """Find the default configuration file path.

    Follows the XDG Base Directory Specification: `$XDG_CONFIG_HOME` when set
    and non-empty, `~/.config` otherwise.

    Args:
        env (dict[str, str] | None): variables to consult, `environment()` when None

    Returns:
        Path: `<config home>/code-to-prompt/config.json`
    """
    env = environment() if env is None else env
    xdg = env.get("XDG_CONFIG_HOME", "")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / CONFIG_APP_DIR / CONFIG_FILENAME


def config_key_to_field(key: str) -> str:
    """Map a config-file key (`include-hidden`) to its `Settings` field (`include_hidden`)."""
    return key.replace("-", "_")


def load_config(config_path: Path, debug: DebugLogger | None = None) -> dict[str, Any]:
    """Load configuration values from a JSON (or YAML) file.

    Args:
        config_path (Path): the path to the configuration file
        debug (DebugLogger | None): diagnostic sink

    Returns:
        dict[str, Any]: the configuration keyed by `Settings` field name, or an
            empty dict if the file is missing, unreadable or malformed
    """
    debug = debug or logger.debug
    debug(f"Attempting to load configuration from: {config_path}")
    if not config_path.is_file():
        debug(f"Config file not found at {config_path}. Using defaults/flags.")
        return {}
    try:
        parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        logger.error("Error parsing config file", path=str(config_path), error=str(e))
        return {}
    except OSError as e:
        logger.error("Error reading config file", path=str(config_path), error=str(e))
        return {}
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        logger.error("Invalid configuration format, expected a mapping", path=str(config_path))
        return {}

    if config_path == get_xdg_config_path() and parsed:
        logger.info("Loaded configuration from default path", path=str(config_path))

    known = set(Settings.model_fields) - {"paths", "config"}
    values: dict[str, Any] = {}
    for key, value in parsed.items():
        field = config_key_to_field(str(key))
        if field not in known:
            logger.warning("Ignoring unknown configuration key", key=str(key), path=str(config_path))
            continue
        debug(f"  {key}: {value!r}")
        values[field] = value
    return values


def init_config(config_path: Path | None = None, debug: DebugLogger | None = None) -> bool:
    """Create the default configuration file if it doesn't exist.

    Args:
        config_path (Path | None): where to write, the XDG default when None
        debug (DebugLogger | None): diagnostic sink

    Raises:
        ConfigFileError: if the directory or file cannot be written

    Returns:
        bool: True if the file was created, False if it already existed
    """
    debug = debug or logger.debug
    config_path = config_path or get_xdg_config_path()
    debug(f"Initializing configuration at: {config_path}")
    if config_path.exists():
        logger.warning("Configuration file already exists, no action taken", path=str(config_path))
        return False
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(DEFAULT_CONFIG, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise ConfigFileError(path=config_path, reason=str(e)) from e
    logger.info("Created default configuration file", path=str(config_path))
    return True
