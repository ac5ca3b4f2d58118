"""Core data models shared across overviewgen components."""

from dataclasses import dataclass, field
from typing import Dict, Tuple, Union

UNKNOWN_TYPE = "unknown"

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD")


@dataclass(frozen=True)
class SourceFile:
    """A source file handed to the scanner by workspace discovery."""

    path: str
    extension: str
    text: str


@dataclass(frozen=True)
class AnnotationRecord:
    """A single `[Attr(...)]` or `@Decorator(...)` marker."""

    name: str
    raw_arguments: Union[Dict[str, str], str] = field(default_factory=dict)
    text: str = ""


@dataclass(frozen=True)
class MemberRecord:
    """A member declared inside a type body."""

    name: str
    member_kind: str
    declared_type: str
    signature: str
    annotations: Tuple[AnnotationRecord, ...] = ()


@dataclass(frozen=True)
class TypeRecord:
    """A type declaration located in a source file."""

    name: str
    kind: str
    base_types: Tuple[str, ...] = ()
    implemented_interfaces: Tuple[str, ...] = ()
    members: Tuple[MemberRecord, ...] = ()
    enum_values: Tuple[str, ...] = ()
    annotations: Tuple[AnnotationRecord, ...] = ()
    route_prefix: str = ""


@dataclass(frozen=True)
class EndpointRecord:
    """HTTP endpoint derived from an annotated handler method."""

    route: str
    http_method: str
    container_name: str
    handler_name: str
    dto_type_names: Tuple[str, ...] = ()
    signature: str = ""


@dataclass(frozen=True)
class FileMetadata:
    """Everything the scanner learned about one file."""

    path: str
    extension: str
    types: Tuple[TypeRecord, ...] = ()
    endpoints: Tuple[EndpointRecord, ...] = ()
    category: str = ""

    @property
    def parsed(self) -> bool:
        return bool(self.types)


__all__ = [
    "AnnotationRecord",
    "EndpointRecord",
    "FileMetadata",
    "HTTP_METHODS",
    "MemberRecord",
    "SourceFile",
    "TypeRecord",
    "UNKNOWN_TYPE",
]
