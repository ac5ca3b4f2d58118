"""Tests for overviewgen.config."""

from __future__ import annotations

import copy
from pathlib import Path

import pytest

from overviewgen.config import CategoryRule, ConfigError, ScanConfig, find_config, load_config


def test_load_config_parses_expected_fields(workspace, scan_config_data) -> None:
    workspace.write_config(scan_config_data)

    config = load_config(workspace.path())

    assert isinstance(config, ScanConfig)
    assert config.source == (workspace.path() / "ai-scan-config.json").resolve()
    assert config.category_names() == ["Controllers", "Models"]
    controllers = config.categories[0]
    assert controllers.include_paths == ["Controllers"]
    assert controllers.extensions == [".cs"]
    assert controllers.description == "HTTP controllers."
    assert config.api_endpoints == CategoryRule(
        name="apiEndpoints",
        description="HTTP surface.",
        include_paths=["Controllers"],
        extensions=[".cs"],
    )
    assert config.project_structure is not None
    assert config.project_structure.excluded_paths == ["*/docs"]
    assert config.generated_files[0].name == "BackendOverview.md"
    assert config.generated_files[0].included_categories == ["Controllers", "Models"]
    assert config.markdown.header_level == 2
    assert config.markdown.code_block_style == "fenced"
    assert config.markdown.templates_dir is None


def test_load_config_reads_yaml(tmp_path: Path) -> None:
    config_file = tmp_path / "ai-scan-config.yml"
    config_file.write_text(
        """
categories:
  - name: Scripts
    paths: [scripts]
    extensions: [.gd]
generated_files:
  - name: Gameplay.md
    included_categories: [Scripts]
markdown:
  header_level: 9
  code_block_style: PRE
  templates_dir: templates
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.category_names() == ["Scripts"]
    assert config.generated_files[0].included_categories == ["Scripts"]
    assert config.api_endpoints is None
    assert config.project_structure is None
    assert config.markdown.header_level == 5
    assert config.markdown.code_block_style == "pre"
    assert config.markdown.templates_dir == tmp_path.resolve() / "templates"


def test_find_config_prefers_json_over_yaml(tmp_path: Path) -> None:
    (tmp_path / "ai-scan-config.yml").write_text("categories: []\n", encoding="utf-8")
    (tmp_path / "ai-scan-config.json").write_text("{}", encoding="utf-8")

    assert find_config(tmp_path).name == "ai-scan-config.json"


def test_find_config_falls_back_to_example(tmp_path: Path) -> None:
    (tmp_path / "ai-scan-config.example.json").write_text("{}", encoding="utf-8")

    assert find_config(tmp_path).name == "ai-scan-config.example.json"


def test_load_config_accepts_an_explicit_file(workspace, scan_config_data) -> None:
    path = workspace.write_config(scan_config_data, name="custom.json")

    config = load_config(path)

    assert config.source == path.resolve()


def test_missing_config_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="No configuration file found"):
        load_config(tmp_path)

    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "absent.json")


def test_malformed_json_raises(tmp_path: Path) -> None:
    (tmp_path / "ai-scan-config.json").write_text("{ categories: ", encoding="utf-8")

    with pytest.raises(ConfigError, match="Error parsing configuration JSON"):
        load_config(tmp_path)


def _without_extensions(data):
    data["categories"][1]["extensions"] = []


def _duplicate_category(data):
    data["categories"][1]["name"] = "Controllers"


def _unknown_reference(data):
    data["generatedFiles"][0]["includedCategories"].append("Views")


def _no_categories(data):
    data["categories"] = []


def _no_generated_files(data):
    data["generatedFiles"] = []


def _unnamed_report(data):
    data["generatedFiles"][0]["name"] = " "


@pytest.mark.parametrize(
    ("mutate", "message"),
    [
        (_without_extensions, "must define at least one file extension"),
        (_duplicate_category, "defined more than once"),
        (_unknown_reference, "unknown category: Views"),
        (_no_categories, "at least one category"),
        (_no_generated_files, "at least one generated file"),
        (_unnamed_report, "non-empty name"),
    ],
)
def test_invalid_configuration_is_rejected(workspace, scan_config_data, mutate, message) -> None:
    data = copy.deepcopy(scan_config_data)
    mutate(data)
    workspace.write_config(data)

    with pytest.raises(ConfigError, match=message):
        load_config(workspace.path())
