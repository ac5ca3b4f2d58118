"""Derive HTTP endpoints from annotated handler methods."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from ..models import UNKNOWN_TYPE, AnnotationRecord, EndpointRecord, MemberRecord, TypeRecord
from .annotations import first_string_argument, split_top_level
from .dialects import Dialect, Parameter

_WRAPPED = re.compile(r"^(?P<outer>[\w.]+)\s*<(?P<inner>.+)>$", re.DOTALL)


def compose_route(prefix: str, suffix: str) -> str:
    """Join a container prefix and a handler suffix.

    >>> compose_route("Account", "{id}")
    'Account/{id}'
    >>> compose_route("Account", "")
    'Account/'
    >>> compose_route("", "list")
    'list'
    """
    prefix = prefix.strip()
    suffix = suffix.strip()
    if prefix and suffix:
        if prefix.endswith("/") or suffix.startswith("/"):
            return prefix + suffix
        return f"{prefix}/{suffix}"
    if prefix:
        return prefix if prefix.endswith("/") else f"{prefix}/"
    return suffix


def extract_endpoints(record: TypeRecord, dialect: Dialect) -> Tuple[EndpointRecord, ...]:
    """Return one endpoint per verb-annotated method of `record`."""
    endpoints: List[EndpointRecord] = []
    for member in record.members:
        endpoint = extract_endpoint(member, record.name, record.route_prefix, dialect)
        if endpoint is not None:
            endpoints.append(endpoint)
    return tuple(endpoints)


def extract_endpoint(
    member: MemberRecord, container_name: str, route_prefix: str, dialect: Dialect
) -> Optional[EndpointRecord]:
    if member.member_kind != "method":
        return None
    verb: Optional[str] = None
    verb_annotation: Optional[AnnotationRecord] = None
    for annotation in member.annotations:
        verb = dialect.http_verb(annotation)
        if verb is not None:
            verb_annotation = annotation
            break
    if verb is None or verb_annotation is None:
        return None

    suffix = first_string_argument(verb_annotation, "template", "path") or ""
    if not suffix:
        suffix = _route_suffix(member.annotations, dialect) or ""

    return EndpointRecord(
        route=compose_route(route_prefix, suffix),
        http_method=verb,
        container_name=container_name,
        handler_name=member.name,
        dto_type_names=infer_dto_names(member, dialect),
        signature=member.signature,
    )


def infer_dto_names(member: MemberRecord, dialect: Dialect) -> Tuple[str, ...]:
    """Best-effort payload type names for a handler, in order, without repeats.

    Parameters carrying a binding annotation contribute their declared type,
    primitive or not. Only when none is bound are the other parameters
    considered, and then primitives are skipped. A wrapped return type adds
    its inner type afterwards.
    """
    names: List[str] = []
    parameters = dialect.parameters(member.signature)
    bound = [parameter for parameter in parameters if _is_bound(parameter, dialect)]
    if bound:
        candidates = [parameter.declared_type for parameter in bound]
    else:
        candidates = [
            parameter.declared_type
            for parameter in parameters
            if not dialect.is_primitive(parameter.declared_type)
        ]
    for candidate in candidates:
        _append_unique(names, candidate)

    returned = _unwrap_return(member.declared_type, dialect)
    if returned:
        _append_unique(names, returned)
    return tuple(names)


def _route_suffix(annotations: Sequence[AnnotationRecord], dialect: Dialect) -> Optional[str]:
    for annotation in annotations:
        if annotation.name.lower() in dialect.route_annotations:
            value = first_string_argument(annotation, "template", "path")
            if value:
                return value
    return None


def _is_bound(parameter: Parameter, dialect: Dialect) -> bool:
    return any(item.name.lower() in dialect.binding_annotations for item in parameter.annotations)


def _unwrap_return(declared_type: str, dialect: Dialect) -> Optional[str]:
    # Task<ActionResult<OrderDto>> -> OrderDto; Task<IActionResult> -> None.
    inner = _wrapped_argument(declared_type)
    if inner is None:
        return None
    if _base_name(inner) in dialect.action_result_markers:
        inner = _wrapped_argument(inner)
        if inner is None:
            return None
    if _base_name(inner) in dialect.action_result_markers or dialect.is_primitive(inner):
        return None
    return inner


def _wrapped_argument(type_name: str) -> Optional[str]:
    match = _WRAPPED.match(type_name.strip())
    if not match:
        return None
    parts = split_top_level(match.group("inner"))
    if not parts or len(parts) != 1:
        return None
    return parts[0]


def _base_name(type_name: str) -> str:
    return type_name.split("<", 1)[0].strip().split(".")[-1]


def _append_unique(names: List[str], candidate: str) -> None:
    candidate = candidate.strip()
    if candidate and candidate != UNKNOWN_TYPE and candidate not in names:
        names.append(candidate)


__all__ = ["compose_route", "extract_endpoint", "extract_endpoints", "infer_dto_names"]
