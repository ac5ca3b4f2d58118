"""Tests for declaration location and route prefixes."""

from __future__ import annotations

import textwrap

from overviewgen.models import AnnotationRecord
from overviewgen.scanner.declarations import locate_declarations, resolve_route_prefix
from overviewgen.scanner.dialects import CSHARP, TYPESCRIPT


def _text(value: str) -> str:
    return textwrap.dedent(value).lstrip("\n")


def test_csharp_controller_declaration_collects_attributes_and_prefix() -> None:
    text = _text(
        """
        using System;

        namespace Shop.Api;

        [ApiController]
        [Route("api/[controller]")]
        public class OrdersController : ControllerBase
        {
        }
        """
    )
    (declaration,) = locate_declarations(text, CSHARP)
    assert declaration.name == "OrdersController"
    assert declaration.kind == "class"
    assert declaration.base_types == ("ControllerBase",)
    assert [item.name for item in declaration.annotations] == ["ApiController", "Route"]
    assert declaration.route_prefix == "api/Orders"


def test_csharp_generic_declaration_stops_before_constraints() -> None:
    text = _text(
        """
        public class Repository<T> : IRepository<T>, IDisposable where T : class
        {
        }
        """
    )
    declarations = locate_declarations(text, CSHARP)
    assert [item.name for item in declarations] == ["Repository"]
    assert declarations[0].base_types == ("IRepository<T>", "IDisposable")


def test_csharp_declarations_in_comments_are_ignored() -> None:
    text = _text(
        """
        // public class Fake { }
        public interface IOrderService
        {
        }
        public enum Status { Active }
        """
    )
    declarations = locate_declarations(text, CSHARP)
    assert [(item.name, item.kind) for item in declarations] == [
        ("IOrderService", "interface"),
        ("Status", "enum"),
    ]


def test_typescript_declaration_splits_extends_and_implements() -> None:
    text = _text(
        """
        @Controller('cats')
        export class CatsController extends BaseController implements OnInit, OnDestroy {
        }
        """
    )
    (declaration,) = locate_declarations(text, TYPESCRIPT)
    assert declaration.base_types == ("BaseController",)
    assert declaration.implemented_interfaces == ("OnInit", "OnDestroy")
    assert declaration.route_prefix == "cats"


def test_typescript_type_alias_is_located() -> None:
    (declaration,) = locate_declarations("export type Props = {\n  title: string;\n};\n", TYPESCRIPT)
    assert declaration.kind == "type-alias"
    assert declaration.name == "Props"


def test_route_prefix_falls_back_to_controller_stem() -> None:
    assert resolve_route_prefix("class", "AccountController", (), CSHARP) == "Account"
    assert resolve_route_prefix("class", "OrderService", (), CSHARP) == ""
    assert resolve_route_prefix("interface", "AccountController", (), CSHARP) == ""


def test_route_prefix_prefers_explicit_route() -> None:
    route = AnnotationRecord(name="Route", raw_arguments={"0": '"v1/accounts"'}, text='Route("v1/accounts")')
    assert resolve_route_prefix("class", "AccountController", (route,), CSHARP) == "v1/accounts"
