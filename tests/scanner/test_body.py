"""Tests for brace-delimited body extraction."""

from __future__ import annotations

from overviewgen.scanner.body import extract_body


def test_extract_body_balances_nested_braces() -> None:
    text = "class A { void Run() { if (x) { y(); } } } class B { }"
    body = extract_body(text, len("class A"))
    assert body is not None
    assert text[body.open] == "{"
    assert text[body.close] == "}"
    assert body.text == " void Run() { if (x) { y(); } } "
    assert text[body.close + 1 :] == " class B { }"


def test_extract_body_returns_none_without_brace() -> None:
    assert extract_body("public record Point(int X, int Y);", len("public record Point")) is None


def test_extract_body_skips_terminated_headers() -> None:
    text = "public record Point(int X, int Y);\npublic class Other { }"
    assert extract_body(text, len("public record Point(int X, int Y)")) is None


def test_extract_body_returns_none_for_truncated_source() -> None:
    assert extract_body("class A { void Run() { ", len("class A")) is None


def test_extract_body_for_alias_requires_assignment() -> None:
    text = "type Props = {\n  title: string;\n};"
    body = extract_body(text, len("type Props"), alias=True)
    assert body is not None
    assert body.text.strip() == "title: string;"

    other = "type Id = string;\ntype Props = { title: string };"
    assert extract_body(other, len("type Id"), alias=True) is None
