"""Tests for workspace discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from overviewgen.workspace import WorkspaceScanner, build_ignore_rule, is_ignored, resolve_root


def test_scan_returns_sorted_sources_with_registered_extensions(workspace) -> None:
    workspace.write(
        {
            "Models/Order.cs": "public class Order { }",
            "Controllers/HomeController.cs": "public class HomeController { }",
            "web/app.tsx": "export class App { }",
            "README.md": "# Shop",
        }
    )

    sources = workspace.scan()

    assert [item.path for item in sources] == [
        "Controllers/HomeController.cs",
        "Models/Order.cs",
        "web/app.tsx",
    ]
    assert sources[1].extension == ".cs"
    assert sources[1].text == "public class Order { }"


def test_scan_skips_build_output_and_tooling_directories(workspace) -> None:
    workspace.write(
        {
            "src/App.cs": "public class App { }",
            "bin/Debug/App.cs": "public class Stale { }",
            "obj/App.cs": "public class Generated { }",
            "node_modules/lib/index.ts": "export class Lib { }",
            ".godot/cache.gd": "extends Node",
            "PROJECT_OVERVIEW/Old.cs": "public class Old { }",
        }
    )

    assert [item.path for item in workspace.scan()] == ["src/App.cs"]


def test_scan_honours_gitignore_with_negation(workspace) -> None:
    workspace.write(
        {
            ".gitignore": "generated/\n*.g.cs\n!Keep.g.cs\n",
            "generated/Client.cs": "public class Client { }",
            "src/Model.g.cs": "public class Model { }",
            "src/Keep.g.cs": "public class Keep { }",
            "src/Service.cs": "public class Service { }",
        }
    )

    assert [item.path for item in workspace.scan()] == ["src/Keep.g.cs", "src/Service.cs"]


def test_anchored_ignore_rule_only_matches_from_root() -> None:
    rule = build_ignore_rule("/build")
    assert rule is not None
    assert is_ignored("build", True, [rule])
    assert not is_ignored("src/build", True, [rule])


def test_resolve_root_rejects_missing_and_file_paths(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        resolve_root(tmp_path / "missing")

    file_path = tmp_path / "file.cs"
    file_path.write_text("", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        resolve_root(file_path)

    with pytest.raises(FileNotFoundError):
        WorkspaceScanner([".cs"]).scan(tmp_path / "missing")


def test_unreadable_files_are_kept_without_text(workspace, monkeypatch) -> None:
    workspace.write(
        {
            "src/Good.cs": "public class Good { }",
            "src/Broken.cs": "public class Broken { }",
        }
    )
    original = Path.read_text

    def read_text(self, *args, **kwargs):
        if self.name == "Broken.cs":
            raise PermissionError("denied")
        return original(self, *args, **kwargs)

    monkeypatch.setattr(Path, "read_text", read_text)

    sources = workspace.scan()

    assert [(item.path, item.text) for item in sources] == [
        ("src/Broken.cs", ""),
        ("src/Good.cs", "public class Good { }"),
    ]
