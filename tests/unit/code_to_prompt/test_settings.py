from __future__ import annotations

import json
from pathlib import Path

import pytest

from code_to_prompt.config import DEFAULT_CONCURRENCY, DEFAULT_CONFIG, OutputFormat
from code_to_prompt.exceptions import ConfigFileError, ConflictingOptionsError
from code_to_prompt.settings import Settings, config_key_to_field, get_xdg_config_path, init_config, load_config


def test_settings_defaults() -> None:
    settings = Settings()

    assert settings.paths == []
    assert settings.output is None
    assert settings.concurrency == DEFAULT_CONCURRENCY
    assert settings.output_format == OutputFormat.DEFAULT
    assert settings.tree is False


@pytest.mark.unit
def test_output_format() -> None:
    assert Settings(cxml=True).output_format == OutputFormat.CXML
    assert Settings(markdown=True).output_format == OutputFormat.MARKDOWN


@pytest.mark.unit
def test_clipboard_and_output_conflict() -> None:
    with pytest.raises(ConflictingOptionsError, match="mutually exclusive"):
        Settings(clipboard=True, output=Path("out.txt"))


@pytest.mark.unit
def test_cxml_and_markdown_conflict() -> None:
    with pytest.raises(ConflictingOptionsError, match="--cxml and --markdown"):
        Settings(cxml=True, markdown=True)


@pytest.mark.unit
def test_xdg_config_path() -> None:
    assert get_xdg_config_path({"XDG_CONFIG_HOME": "/xdg"}) == Path("/xdg/code-to-prompt/config.json")
    assert get_xdg_config_path({"XDG_CONFIG_HOME": ""}) == Path.home() / ".config" / "code-to-prompt" / "config.json"


@pytest.mark.unit
def test_config_key_to_field() -> None:
    assert config_key_to_field("include-hidden") == "include_hidden"
    assert config_key_to_field("tree") == "tree"


@pytest.mark.unit
def test_load_config_missing_file(tmp_path: Path) -> None:
    assert load_config(tmp_path / "missing.json") == {}


@pytest.mark.unit
def test_load_config_maps_keys_and_drops_unknown(tmp_path: Path) -> None:
    config = tmp_path / "config.json"
    config.write_text(
        json.dumps({"include-hidden": True, "ignore": ["*.log"], "line-numbers": True, "colour": "blue"}),
        encoding="utf-8",
    )
    messages: list[str] = []

    values = load_config(config, messages.append)

    assert values == {"include_hidden": True, "ignore": ["*.log"], "line_numbers": True}
    assert f"Attempting to load configuration from: {config}" in messages


@pytest.mark.unit
def test_load_config_accepts_yaml(tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("tree: true\nextension:\n  - .py\n", encoding="utf-8")

    assert load_config(config) == {"tree": True, "extension": [".py"]}


@pytest.mark.unit
@pytest.mark.parametrize("text", ["{not: valid: json", "[1, 2, 3]", ""])
def test_load_config_malformed_falls_back_to_empty(tmp_path: Path, text: str) -> None:
    config = tmp_path / "config.json"
    config.write_text(text, encoding="utf-8")

    assert load_config(config) == {}


@pytest.mark.unit
def test_init_config_creates_default_file(tmp_path: Path) -> None:
    config = tmp_path / "app" / "config.json"

    assert init_config(config) is True
    assert json.loads(config.read_text(encoding="utf-8")) == DEFAULT_CONFIG
    assert init_config(config) is False


@pytest.mark.unit
def test_init_config_write_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")

    with pytest.raises(ConfigFileError):
        init_config(blocker / "config.json")
