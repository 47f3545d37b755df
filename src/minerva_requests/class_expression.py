"""Class expression IR and the adapter that requests consume.

Requests never inspect class expressions; they only embed the structure
returned by ``to_dict()`` into their ``expressions`` argument. Any object
implementing :class:`ClassExpressionAdapter` can be plugged in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Protocol, Union

from minerva_requests.errors import InvalidArgumentError, InvalidOperationError


SET_KINDS = ("intersection", "union")


class ClassExpr:
    """Base class for class expression IR."""

    def to_dict(self) -> dict[str, Any]:  # pragma: no cover - interface
        raise NotImplementedError


@dataclass(frozen=True)
class ClassRef(ClassExpr):
    id: str

    def __post_init__(self) -> None:
        if not self.id or not isinstance(self.id, str):
            raise InvalidArgumentError("Class id must be a non-empty string.")

    def to_dict(self) -> dict[str, Any]:
        return {"type": "class", "id": self.id}


@dataclass(frozen=True)
class SomeValuesFrom(ClassExpr):
    """Existential restriction: ``property_id`` some ``filler``."""

    property_id: str
    filler: ClassExpr

    def __post_init__(self) -> None:
        if not self.property_id or not isinstance(self.property_id, str):
            raise InvalidArgumentError("Property id must be a non-empty string.")

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "svf",
            "property": {"type": "property", "id": self.property_id},
            "filler": self.filler.to_dict(),
        }


@dataclass(frozen=True)
class ClassSet(ClassExpr):
    kind: str
    expressions: tuple[ClassExpr, ...]

    def __post_init__(self) -> None:
        if self.kind not in SET_KINDS:
            raise InvalidOperationError(
                f"Set kind must be 'intersection' or 'union', got {self.kind!r}."
            )
        object.__setattr__(self, "expressions", tuple(self.expressions))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "expressions": [expr.to_dict() for expr in self.expressions],
        }


ClassExprInput = Union[str, ClassExpr, dict[str, Any]]


def expression_from_dict(data: dict[str, Any]) -> ClassExpr:
    kind = data.get("type")
    if kind == "class":
        return ClassRef(id=data.get("id"))
    if kind == "svf":
        prop = data.get("property") or {}
        filler = data.get("filler")
        if not isinstance(filler, dict):
            raise InvalidArgumentError("svf expression requires a filler.")
        return SomeValuesFrom(
            property_id=prop.get("id"),
            filler=expression_from_dict(filler),
        )
    if kind in SET_KINDS:
        return ClassSet(
            kind=kind,
            expressions=tuple(expression_from_dict(e) for e in data.get("expressions", [])),
        )
    raise InvalidArgumentError(f"Unknown class expression type: {kind}")


class ClassExpressionAdapter(Protocol):
    def construct(self, value: ClassExprInput) -> ClassExpr: ...

    def as_svf(self, value: ClassExprInput, property_id: str) -> ClassExpr: ...

    def as_set(self, kind: str, values: Iterable[ClassExprInput]) -> ClassExpr: ...


class DefaultClassExpressionAdapter:
    """Builds the IR above from ids, IR objects or structured dicts."""

    def construct(self, value: ClassExprInput) -> ClassExpr:
        if isinstance(value, ClassExpr):
            return value
        if isinstance(value, str):
            return ClassRef(id=value)
        if isinstance(value, dict):
            return expression_from_dict(value)
        raise InvalidArgumentError(
            f"Cannot build a class expression from {type(value).__name__}."
        )

    def as_svf(self, value: ClassExprInput, property_id: str) -> ClassExpr:
        return SomeValuesFrom(property_id=property_id, filler=self.construct(value))

    def as_set(self, kind: str, values: Iterable[ClassExprInput]) -> ClassExpr:
        if isinstance(values, (str, dict)):
            raise InvalidArgumentError("Set expressions require a list of members.")
        return ClassSet(kind=kind, expressions=tuple(self.construct(v) for v in values))
