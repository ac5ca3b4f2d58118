from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pytest

from tests._fixtures.workspace_builder import WorkspaceBuilder


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a reusable workspace builder rooted at the pytest tmp_path."""
    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def scan_config_data() -> Dict[str, Any]:
    """A minimal valid configuration with two disjoint categories."""
    return {
        "projectStructure": {
            "description": "Layout of the sample workspace.",
            "excludedPaths": ["*/docs"],
            "excludedExtensions": [".md"],
        },
        "apiEndpoints": {
            "description": "HTTP surface.",
            "paths": ["Controllers"],
            "extensions": [".cs"],
        },
        "categories": [
            {
                "name": "Controllers",
                "description": "HTTP controllers.",
                "paths": ["Controllers"],
                "extensions": [".cs"],
            },
            {
                "name": "Models",
                "paths": ["Models"],
                "extensions": ["*.cs"],
            },
        ],
        "generatedFiles": [
            {
                "name": "BackendOverview.md",
                "description": "Controllers and models.",
                "includedCategories": ["Controllers", "Models"],
            }
        ],
        "markdown": {"headerLevel": 2, "codeBlockStyle": "fenced"},
    }
