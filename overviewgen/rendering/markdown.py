"""Markdown report rendering backed by Jinja2 templates."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from jinja2 import Environment, FileSystemLoader

from ..classification import CategoryMatchingEngine
from ..config import CategoryRule, GeneratedFileSpec, MarkdownConfig, ProjectStructureConfig
from ..models import EndpointRecord, FileMetadata, TypeRecord
from .lint import MarkdownLinter
from .tree import collect_tree_paths, render_tree

PROJECT_STRUCTURE_FILE = "ProjectStructure.md"
API_ENDPOINTS_FILE = "ApiEndpoints.md"


@dataclass(frozen=True)
class EndpointRow:
    """One row of the API endpoints table."""

    route: str
    http_method: str
    controller: str
    handler: str
    request_dto: str
    response_dto: str

    @classmethod
    def from_endpoint(cls, endpoint: EndpointRecord) -> "EndpointRow":
        request = next((name for name in endpoint.dto_type_names if "Request" in name), "")
        response = next((name for name in endpoint.dto_type_names if "Request" not in name), "")
        return cls(
            route=endpoint.route,
            http_method=endpoint.http_method,
            controller=endpoint.container_name,
            handler=endpoint.handler_name,
            request_dto=request,
            response_dto=response,
        )


@dataclass(frozen=True)
class FileSection:
    path: str
    types: Sequence[TypeRecord]


@dataclass(frozen=True)
class CategorySection:
    name: str
    description: Optional[str]
    files: Sequence[FileSection]


class MarkdownRenderer:
    """Renders the overview reports and lints the result."""

    def __init__(
        self,
        markdown: MarkdownConfig | None = None,
        linter: MarkdownLinter | None = None,
    ) -> None:
        self.markdown = markdown or MarkdownConfig()
        self.linter = linter or MarkdownLinter()
        self._env = self._create_env(self.markdown.templates_dir)

    def render_project_structure(
        self, root: Path, config: ProjectStructureConfig | None = None
    ) -> str:
        tree = render_tree(root.name or str(root), collect_tree_paths(root, config))
        return self._render(
            "project_structure.md.j2",
            description=config.description if config else None,
            tree=tree,
            excluded_paths=list(config.excluded_paths) if config else [],
            excluded_extensions=list(config.excluded_extensions) if config else [],
        )

    def render_api_endpoints(
        self, files: Iterable[FileMetadata], rule: CategoryRule | None = None
    ) -> str:
        selected = list(files)
        if rule is not None and _has_filters(rule):
            engine = CategoryMatchingEngine([rule])
            selected = [
                item for item in selected if engine.rule_matches(rule, item.path, item.extension)
            ]
        endpoints = [endpoint for item in selected for endpoint in item.endpoints]
        endpoints.sort(key=lambda endpoint: (endpoint.route, endpoint.http_method))
        return self._render(
            "api_endpoints.md.j2",
            description=rule.description if rule else None,
            rows=[EndpointRow.from_endpoint(endpoint) for endpoint in endpoints],
        )

    def render_report(
        self,
        spec: GeneratedFileSpec,
        files: Iterable[FileMetadata],
        categories: Sequence[CategoryRule] = (),
    ) -> Optional[str]:
        """Render one generated file; None when its categories matched nothing."""
        descriptions = {rule.name: rule.description for rule in categories}
        grouped: Dict[str, List[FileMetadata]] = {}
        for item in files:
            if item.category in spec.included_categories and item.types:
                grouped.setdefault(item.category, []).append(item)
        if not grouped:
            return None

        sections = [
            CategorySection(
                name=name,
                description=descriptions.get(name),
                files=[
                    FileSection(path=item.path, types=item.types)
                    for item in sorted(grouped[name], key=lambda item: item.path)
                ],
            )
            for name in spec.included_categories
            if name in grouped
        ]
        return self._render(
            "category_report.md.j2",
            title=Path(spec.name).stem,
            description=spec.description,
            categories=sections,
        )

    def _render(self, template_name: str, **context: object) -> str:
        level = self.markdown.header_level
        fenced = self.markdown.code_block_style == "fenced"
        template = self._env.get_template(template_name)
        content = template.render(
            h2="#" * level,
            h3="#" * (level + 1),
            code_start="```" if fenced else "<pre>",
            code_end="```" if fenced else "</pre>",
            **context,
        )
        return self.linter.lint(content)

    @staticmethod
    def _create_env(templates_dir: Path | None) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        env.filters["cell"] = _table_cell
        env.filters["code_list"] = _code_list
        return env


def _has_filters(rule: CategoryRule) -> bool:
    return bool(
        rule.include_paths
        or rule.exclude_paths
        or rule.include_name_patterns
        or rule.exclude_name_patterns
        or rule.extensions
    )


def _table_cell(value: object) -> str:
    return str(value or "").replace("|", "\\|")


def _code_list(values: Iterable[str]) -> str:
    return ", ".join(f"`{value}`" for value in values)


__all__ = [
    "API_ENDPOINTS_FILE",
    "EndpointRow",
    "MarkdownRenderer",
    "PROJECT_STRUCTURE_FILE",
]
