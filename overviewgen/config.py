"""Configuration loading for overviewgen (ai-scan-config.json / .yml)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAMES = (
    "ai-scan-config.json",
    "ai-scan-config.yml",
    "ai-scan-config.yaml",
    "ai-scan-config.example.json",
)


class ConfigError(RuntimeError):
    """Raised when the configuration file is missing, unparsable or invalid."""


@dataclass(frozen=True)
class CategoryRule:
    """Matching rules for one report category."""

    name: str
    description: Optional[str] = None
    include_paths: List[str] = field(default_factory=list)
    exclude_paths: List[str] = field(default_factory=list)
    include_name_patterns: List[str] = field(default_factory=list)
    exclude_name_patterns: List[str] = field(default_factory=list)
    extensions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class GeneratedFileSpec:
    """An output report assembled from a subset of categories."""

    name: str
    description: Optional[str] = None
    included_categories: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ProjectStructureConfig:
    """Settings for the directory tree report."""

    description: Optional[str] = None
    excluded_paths: List[str] = field(default_factory=list)
    excluded_extensions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class MarkdownConfig:
    """Markdown formatting options."""

    header_level: int = 2
    code_block_style: str = "fenced"
    templates_dir: Optional[Path] = None


@dataclass(frozen=True)
class ScanConfig:
    """Represents the settings defined in the scan configuration file."""

    source: Optional[Path] = None
    project_structure: Optional[ProjectStructureConfig] = None
    api_endpoints: Optional[CategoryRule] = None
    categories: List[CategoryRule] = field(default_factory=list)
    generated_files: List[GeneratedFileSpec] = field(default_factory=list)
    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)

    def category_names(self) -> List[str]:
        return [category.name for category in self.categories]


def find_config(root: Path) -> Path:
    """Return the first configuration file present in `root`."""
    root = root.expanduser()
    for filename in CONFIG_FILENAMES:
        candidate = root / filename
        if candidate.is_file():
            return candidate.resolve()
    expected = " or ".join(CONFIG_FILENAMES)
    raise ConfigError(f"No configuration file found in {root}. Expected: {expected}")


def load_config(config_path: Path) -> ScanConfig:
    """Load and validate configuration from a file or from a directory holding one."""
    config_path = config_path.expanduser()
    config_file = find_config(config_path) if config_path.is_dir() else config_path.resolve()
    if not config_file.exists():
        raise ConfigError(f"Configuration file not found: {config_file}")

    data = _normalise_keys(_read_config(config_file))
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    structure_data = _as_dict(data.get("projectstructure"))
    project_structure = None
    if structure_data:
        project_structure = ProjectStructureConfig(
            description=_as_str(structure_data.get("description")),
            excluded_paths=_as_str_list(structure_data.get("excludedpaths")),
            excluded_extensions=_as_str_list(structure_data.get("excludedextensions")),
        )

    api_data = _as_dict(data.get("apiendpoints"))
    api_endpoints = _build_rule(api_data, default_name="apiEndpoints") if api_data else None

    categories = [
        _build_rule(item) for item in _as_list(data.get("categories")) if isinstance(item, dict)
    ]

    generated_files = [
        GeneratedFileSpec(
            name=_as_str(item.get("name")) or "",
            description=_as_str(item.get("description")),
            included_categories=_as_str_list(item.get("includedcategories")),
        )
        for item in _as_list(data.get("generatedfiles"))
        if isinstance(item, dict)
    ]

    markdown_data = _as_dict(data.get("markdown"))
    markdown = MarkdownConfig()
    if markdown_data:
        header_level = _as_int(markdown_data.get("headerlevel"))
        style = _as_str(markdown_data.get("codeblockstyle"))
        templates_dir_str = _as_str(markdown_data.get("templatesdir"))
        markdown = MarkdownConfig(
            header_level=max(1, min(header_level, 5)) if header_level is not None else 2,
            code_block_style=(style or "fenced").lower(),
            templates_dir=config_file.parent / templates_dir_str if templates_dir_str else None,
        )

    config = ScanConfig(
        source=config_file,
        project_structure=project_structure,
        api_endpoints=api_endpoints,
        categories=categories,
        generated_files=generated_files,
        markdown=markdown,
    )
    validate_config(config)
    return config


def validate_config(config: ScanConfig) -> None:
    """Reject configurations the classifier and renderer cannot honour."""
    if not config.categories:
        raise ConfigError("Configuration must define at least one category.")
    if not config.generated_files:
        raise ConfigError("Configuration must define at least one generated file.")

    known: set[str] = set()
    for category in config.categories:
        if not category.name.strip():
            raise ConfigError("All categories must have a non-empty name.")
        if category.name in known:
            raise ConfigError(f"Category '{category.name}' is defined more than once.")
        if not category.extensions:
            raise ConfigError(
                f"Category '{category.name}' must define at least one file extension."
            )
        known.add(category.name)

    for spec in config.generated_files:
        if not spec.name.strip():
            raise ConfigError("All generated files must have a non-empty name.")
        if not spec.included_categories:
            raise ConfigError(f"Generated file '{spec.name}' must include at least one category.")
        for name in spec.included_categories:
            if name not in known:
                raise ConfigError(
                    f"Generated file '{spec.name}' references unknown category: {name}"
                )


def _build_rule(data: Dict[str, Any], default_name: str = "") -> CategoryRule:
    return CategoryRule(
        name=_as_str(data.get("name")) or default_name,
        description=_as_str(data.get("description")),
        include_paths=_as_str_list(data.get("paths")),
        exclude_paths=_as_str_list(data.get("excludedpaths")),
        include_name_patterns=_as_str_list(data.get("patterns")),
        exclude_name_patterns=_as_str_list(data.get("excludedpatterns")),
        extensions=_as_str_list(data.get("extensions")),
    )


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}

    if path.suffix.lower() in {".yml", ".yaml"}:
        try:
            return yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Error parsing configuration JSON in {path.name}: {exc}") from exc


def _normalise_keys(value: Any) -> Any:
    # Property names are matched case-insensitively; `_` and `-` are ignored.
    if isinstance(value, dict):
        return {
            str(key).replace("_", "").replace("-", "").lower(): _normalise_keys(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_normalise_keys(item) for item in value]
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAMES",
    "CategoryRule",
    "ConfigError",
    "GeneratedFileSpec",
    "MarkdownConfig",
    "ProjectStructureConfig",
    "ScanConfig",
    "find_config",
    "load_config",
    "validate_config",
]
