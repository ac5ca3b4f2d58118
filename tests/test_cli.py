"""CLI parser and command behaviour tests."""

from __future__ import annotations

import copy

import pytest

from overviewgen.cli import _build_parser, format_assignments, main
from overviewgen.models import FileMetadata
from overviewgen.orchestrator import RunOutcome


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "generate"])
    assert args.verbose is True
    assert args.command == "generate"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["classify", "src", "--verbose"])
    assert args.verbose is True
    assert args.command == "classify"
    assert args.path == "src"


def test_cli_accepts_generate_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["generate", "--dry-run", "--workers", "4", "--config", "cfg.json", "--output-dir", "out"]
    )
    assert args.dry_run is True
    assert args.workers == 4
    assert args.config == "cfg.json"
    assert args.output_dir == "out"


def test_cli_rejects_non_positive_workers() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["generate", "--workers", "0"])


def test_format_assignments_previews_three_files(tmp_path) -> None:
    files = tuple(
        FileMetadata(path=f"Models/M{index}.cs", extension=".cs", category="Models")
        for index in range(5)
    ) + (FileMetadata(path="Tools/Run.cs", extension=".cs"),)
    outcome = RunOutcome(root=tmp_path, files=files, classification={}, unparsed=["Tools/Run.cs"])

    assert format_assignments(outcome).splitlines() == [
        "Category assignments:",
        "  [Models] 5 file(s)",
        "    - M0.cs",
        "    - M1.cs",
        "    - M2.cs",
        "    ... and 2 more",
        "  [uncategorized] 1 file(s)",
        "    - Run.cs",
        "Files without types: 1",
    ]


def test_generate_writes_reports(workspace, scan_config_data, capsys) -> None:
    workspace.write_config(scan_config_data)
    workspace.write({"Models/Order.cs": "public class Order { public int Id { get; set; } }"})

    main(["generate", str(workspace.path())])

    captured = capsys.readouterr()
    assert "  [Models] 1 file(s)" in captured.out
    assert "  - BackendOverview.md" in captured.out
    assert (workspace.path() / "PROJECT_OVERVIEW" / "BackendOverview.md").exists()


def test_classify_does_not_write(workspace, scan_config_data, capsys) -> None:
    workspace.write_config(scan_config_data)
    workspace.write({"Controllers/HomeController.cs": "public class HomeController { }"})

    main(["classify", str(workspace.path())])

    assert "  [Controllers] 1 file(s)" in capsys.readouterr().out
    assert not (workspace.path() / "PROJECT_OVERVIEW").exists()


def test_conflict_exits_with_error(workspace, scan_config_data, capsys) -> None:
    data = copy.deepcopy(scan_config_data)
    data["categories"][1]["paths"] = ["Controllers"]
    workspace.write_config(data)
    workspace.write({"Controllers/HomeController.cs": "public class HomeController { }"})

    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(workspace.path())])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "Classification failed:" in err
    assert "Controllers/HomeController.cs" in err


def test_missing_config_exits_with_error(workspace, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["classify", str(workspace.path())])

    assert excinfo.value.code == 1
    assert "Configuration error:" in capsys.readouterr().err


def test_missing_workspace_exits_with_error(tmp_path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["classify", str(tmp_path / "missing")])

    assert excinfo.value.code == 1
    assert "Workspace path not found" in capsys.readouterr().err


def test_log_file_keeps_debug_detail_when_quiet(workspace, scan_config_data, tmp_path) -> None:
    workspace.write_config(scan_config_data)
    workspace.write({"Models/Order.cs": "public class Order { }"})
    log_file = tmp_path / "logs" / "run.log"

    main(["--quiet", "--log-file", str(log_file), "classify", str(workspace.path())])

    text = log_file.read_text(encoding="utf-8")
    assert "Loaded configuration from" in text
    assert "Discovered 1 source file(s)" in text
