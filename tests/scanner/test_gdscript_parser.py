"""Tests for the GDScript parser."""

from __future__ import annotations

from overviewgen.scanner import GDScriptParser
from tests._fixtures.workspace_builder import source

PLAYER = """
    @tool
    class_name Player
    extends CharacterBody2D

    signal health_changed(old_value, new_value)

    const MAX_SPEED := 300.0
    @export var speed: float = 200.0
    @export_range(0, 100)
    var health := 100
    var _velocity_cache = Vector2.ZERO
    enum State { IDLE, RUNNING }

    func _ready() -> void:
        pass

    func _init():
        pass

    func move(direction: Vector2,
            delta: float) -> Vector2:
        return direction * delta

    func _on_timer_timeout():
        pass
"""


def test_player_script_members() -> None:
    metadata = GDScriptParser().parse(source("scripts/player.gd", PLAYER))

    (record,) = metadata.types
    assert record.name == "Player"
    assert record.kind == "class"
    assert record.base_types == ("CharacterBody2D",)
    assert [item.name for item in record.annotations] == ["tool"]
    assert [(item.name, item.member_kind, item.declared_type) for item in record.members] == [
        ("health_changed", "signal", "unknown"),
        ("MAX_SPEED", "readonly", "unknown"),
        ("speed", "property", "float"),
        ("health", "property", "unknown"),
        ("State", "field", "unknown"),
        ("_ready", "method", "void"),
        ("_init", "constructor", "unknown"),
        ("move", "method", "Vector2"),
    ]


def test_member_annotations_and_signatures() -> None:
    metadata = GDScriptParser().parse(source("scripts/player.gd", PLAYER))
    members = {item.name: item for item in metadata.types[0].members}

    assert [item.name for item in members["speed"].annotations] == ["export"]
    assert [item.name for item in members["health"].annotations] == ["export_range"]
    assert members["speed"].signature == "var speed: float"
    assert members["_ready"].signature == "func _ready() -> void"
    assert members["move"].signature == "func move(direction: Vector2, delta: float) -> Vector2"
    assert members["health_changed"].signature == "signal health_changed(old_value, new_value)"


def test_script_without_class_name_uses_file_stem() -> None:
    text = """
        extends Node  # base node

        func attack(target):
            pass
    """
    metadata = GDScriptParser().parse(source("scripts/enemy.gd", text))
    (record,) = metadata.types
    assert record.name == "enemy"
    assert record.base_types == ("Node",)
    assert [item.name for item in record.members] == ["attack"]
    assert metadata.endpoints == ()


def test_class_name_and_extends_on_one_line() -> None:
    text = """
        class_name Player extends CharacterBody2D

        func jump() -> void:
            pass
    """
    metadata = GDScriptParser().parse(source("scripts/player.gd", text))

    (record,) = metadata.types
    assert record.name == "Player"
    assert record.base_types == ("CharacterBody2D",)
    assert [item.name for item in record.members] == ["jump"]
