"""End-to-end tests for the TypeScript file parser."""

from __future__ import annotations

from overviewgen.scanner import TypeScriptParser
from tests._fixtures.workspace_builder import source


def test_decorated_controller_yields_endpoints() -> None:
    text = """
        import { Body, Controller, Get, Param, Post } from '@nestjs/common';

        @Controller('cats')
        export class CatsController {
          constructor(private readonly catsService: CatsService) {}

          @Get(':id')
          async findOne(@Param('id') id: string): Promise<Cat> {
            return this.catsService.findOne(id);
          }

          @Post()
          create(@Body() dto: CreateCatDto): Promise<void> {
            return this.catsService.create(dto);
          }
        }
    """
    metadata = TypeScriptParser().parse(source("src/cats/cats.controller.ts", text))

    (record,) = metadata.types
    assert record.name == "CatsController"
    assert record.route_prefix == "cats"
    assert [item.name for item in record.annotations] == ["Controller"]
    assert [(item.name, item.member_kind) for item in record.members] == [
        ("constructor", "constructor"),
        ("findOne", "method"),
        ("create", "method"),
    ]
    assert [
        (item.route, item.http_method, item.dto_type_names) for item in metadata.endpoints
    ] == [
        ("cats/:id", "GET", ("string", "Cat")),
        ("cats/", "POST", ("CreateCatDto",)),
    ]


def test_interfaces_enums_and_aliases() -> None:
    text = """
        export interface Cat extends Animal {
          id: number;
          name?: string;
        }

        export enum Color { Red, Green = 2 }

        export type Id = string;

        export type Props = {
          title: string;
          count?: number;
        };
    """
    metadata = TypeScriptParser().parse(source("src/models.ts", text))

    summary = [(item.name, item.kind) for item in metadata.types]
    assert summary == [("Cat", "interface"), ("Color", "enum"), ("Props", "type-alias")]
    cat, color, props = metadata.types
    assert cat.base_types == ("Animal",)
    assert [item.signature for item in cat.members] == ["id: number", "name?: string"]
    assert color.enum_values == ("Red", "Green = 2")
    assert [item.name for item in props.members] == ["title", "count"]


def test_class_declared_in_a_comment_is_skipped() -> None:
    text = """
        // export class Ghost {}
        /* class Phantom { } */
        export class Real {
          value = 1;
        }
    """
    metadata = TypeScriptParser().parse(source("src/real.ts", text))
    assert [item.name for item in metadata.types] == ["Real"]
    assert [item.member_kind for item in metadata.types[0].members] == ["field"]


def test_tsx_extension_is_supported() -> None:
    parser = TypeScriptParser()
    assert parser.supports(".tsx")
    assert parser.supports(".TS")
    assert not parser.supports(".js")
