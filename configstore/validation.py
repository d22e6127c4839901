"""
Required-key validation for loaded configuration documents.

A required spec is an ordered sequence of ``(key, expected)`` pairs, written
either as a dict (insertion order) or as a list of pairs. ``expected`` is one of

- a type tag such as ``"string"``, ``"int"`` or ``"bool"``,
- a nested spec (dict or list of pairs) for a sub-mapping,
- a callable predicate that must return ``True``.

Keys may list aliases, ``"db|database"``: the first name is canonical and a
value found under a later alias is moved to it in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence, Tuple, Union

from .errors import MissingKey, PredicateFailed, TypeMismatch, UnknownExpectedType

ALIAS_SEPARATOR = "|"
CONTEXT_SEPARATOR = "->"

KIND_ALIASES: dict[str, str] = {
    "bool": "boolean",
    "boolean": "boolean",
    "int": "integer",
    "integer": "integer",
    "float": "double",
    "double": "double",
    "str": "string",
    "string": "string",
    "list": "array",
    "array": "array",
    "dict": "mapping",
    "object": "mapping",
    "mapping": "mapping",
}

_PYTHON_TYPE_KINDS: dict[type, str] = {
    bool: "boolean",
    int: "integer",
    float: "double",
    str: "string",
    list: "array",
    dict: "mapping",
}


@dataclass(frozen=True)
class Primitive:
    kind: Any


@dataclass(frozen=True)
class Nested:
    spec: "OrderedSpec"


@dataclass(frozen=True)
class Predicate:
    check: Callable[[Any], Any]


SpecValue = Union[Primitive, Nested, Predicate]
OrderedSpec = Tuple[Tuple[str, SpecValue], ...]
RawSpec = Union[Mapping[str, Any], Sequence[Tuple[str, Any]], Nested]


def normalize_kind(tag: Any) -> str | None:
    """Canonical kind name for a type tag, or None when the tag is unknown."""
    if not isinstance(tag, str):
        return None
    return KIND_ALIASES.get(tag.strip().lower())


def kind_of(value: Any) -> str:
    if value is None:
        return "null"
    # bool before int: bool is an int subclass.
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "double"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "mapping"
    return type(value).__name__


def _check_key(key: Any) -> str:
    if not isinstance(key, str):
        raise ValueError(f"Required spec keys must be strings, got {key!r}.")
    if any(not part for part in key.split(ALIAS_SEPARATOR)):
        raise ValueError(f"Required spec key {key!r} has an empty name.")
    return key


def compile_value(expected: Any) -> SpecValue:
    if isinstance(expected, (Primitive, Nested, Predicate)):
        return expected
    if isinstance(expected, str):
        return Primitive(expected)
    if isinstance(expected, type):
        return Primitive(_PYTHON_TYPE_KINDS.get(expected, expected.__name__))
    if isinstance(expected, (Mapping, list, tuple)):
        return Nested(compile_spec(expected))
    if callable(expected):
        return Predicate(expected)
    # Reported as UnknownExpectedType when (and if) validation reaches it.
    return Primitive(expected)


def compile_spec(raw: RawSpec) -> OrderedSpec:
    """Turn a raw required spec into ordered ``(key, SpecValue)`` pairs."""
    if isinstance(raw, Nested):
        return raw.spec
    if isinstance(raw, Mapping):
        items = list(raw.items())
    elif isinstance(raw, (list, tuple)):
        items = []
        for item in raw:
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                raise ValueError(f"Required spec entries must be (key, expected) pairs, got {item!r}.")
            items.append((item[0], item[1]))
    else:
        raise TypeError(f"Required spec must be a mapping or a sequence of pairs, got {type(raw).__name__}.")
    return tuple((_check_key(key), compile_value(expected)) for key, expected in items)


def resolve_alias(key: str, document: dict[str, Any]) -> str | None:
    """
    Find ``key`` or one of its aliases in ``document``.

    Returns the canonical name, moving the value there first if it was found
    under an alias. Returns None when no candidate is present.
    """
    candidates = key.split(ALIAS_SEPARATOR)
    canonical = candidates[0]
    for candidate in candidates:
        if candidate in document:
            if candidate != canonical:
                document[canonical] = document.pop(candidate)
            return canonical
    return None


def _run_predicate(predicate: Predicate, key: str, value: Any, context: str) -> None:
    try:
        result = predicate.check(value)
    except PredicateFailed:
        raise
    except Exception as e:
        raise PredicateFailed(key, context, str(e) or type(e).__name__) from e
    if result is not True:
        raise PredicateFailed(key, context, f"returned {result!r}")


def _validate(spec: OrderedSpec, document: Any, context: str) -> None:
    if not isinstance(document, dict):
        raise TypeMismatch("", context, "mapping", kind_of(document))

    for key, expected in spec:
        canonical = resolve_alias(key, document)
        if canonical is None:
            raise MissingKey(key, context)
        value = document[canonical]

        if isinstance(expected, Predicate):
            _run_predicate(expected, key, value, context)
        elif isinstance(expected, Nested):
            if not isinstance(value, dict):
                raise TypeMismatch(key, context, "mapping", kind_of(value))
            _validate(expected.spec, value, f"{context}{CONTEXT_SEPARATOR}{canonical}")
        else:
            kind = normalize_kind(expected.kind)
            if kind is None:
                raise UnknownExpectedType(key, context, expected.kind)
            actual = kind_of(value)
            if actual != kind:
                raise TypeMismatch(key, context, kind, actual)


def validate(spec: RawSpec, document: Any, context: str = "root") -> dict[str, Any]:
    """
    Check ``document`` against ``spec``, stopping at the first violation.

    Alias canonicalization mutates ``document`` in place; the same object is
    returned so callers can make that visible.
    """
    _validate(compile_spec(spec), document, context)
    return document
