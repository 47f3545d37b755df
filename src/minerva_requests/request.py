"""Single Minerva operation descriptors."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Iterable, Literal, Optional, Sequence, Union

from minerva_requests.class_expression import (
    ClassExprInput,
    ClassExpressionAdapter,
    DefaultClassExpressionAdapter,
)
from minerva_requests.errors import InvalidArgumentError
from minerva_requests.variable import IdFactory, RequestVariable


Entity = Literal["model", "individual", "edge", "meta"]
ENTITIES = ("model", "individual", "edge", "meta")

_DEFAULT_ADAPTER = DefaultClassExpressionAdapter()


@dataclass(frozen=True)
class FactTriple:
    """A fact is identified by its triple; there is no fact id.

    Attributes:
        subject: Subject individual id.
        object: Object individual id.
        predicate: Relation (edge type) id.
    """

    subject: str
    object: str
    predicate: str

    def __post_init__(self) -> None:
        for value in (self.subject, self.object, self.predicate):
            if not value or not isinstance(value, str):
                raise InvalidArgumentError(
                    "malformed fact: subject, object and predicate are all required."
                )

    def as_list(self) -> list[str]:
        return [self.subject, self.object, self.predicate]

    @staticmethod
    def coerce(value: Any) -> "FactTriple":
        """Accept a ``FactTriple`` or a 3-item list/tuple of ids."""

        if isinstance(value, FactTriple):
            return value
        if isinstance(value, (list, tuple)) and len(value) == 3:
            return FactTriple(*value)
        raise InvalidArgumentError(
            f"malformed fact: expected [subject, object, predicate], got {value!r}."
        )


TripleInput = Union[FactTriple, Sequence[str]]


class Request:
    """One operation against one Minerva entity.

    The request owns a :class:`RequestVariable` that stands in for the
    individual it creates or targets. Unless a caller sets the individual
    explicitly, the serialized form asks the service to bind the new
    individual to that variable, so later requests in the same batch can
    refer to it.
    """

    def __init__(
        self,
        entity: Entity,
        operation: str,
        *,
        adapter: Optional[ClassExpressionAdapter] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        if entity not in ENTITIES:
            raise InvalidArgumentError(f"Unknown request entity: {entity!r}")
        if not operation or not isinstance(operation, str):
            raise InvalidArgumentError("Request operation must be a non-empty string.")
        self._entity = entity
        self._operation = operation
        self._adapter = adapter or _DEFAULT_ADAPTER
        self._individual_id = RequestVariable(id_factory=id_factory)
        self._arguments: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"Request({self._entity!r}, {self._operation!r}, arguments={self._arguments!r})"

    @property
    def entity(self) -> str:
        return self._entity

    @property
    def operation(self) -> str:
        return self._operation

    def _get(self, key: str) -> Any:
        return self._arguments.get(key)

    def _get_set(self, key: str, value: Any) -> Any:
        if value:
            self._arguments[key] = value
        return self._get(key)

    def _ensure_list(self, key: str) -> list[Any]:
        return self._arguments.setdefault(key, [])

    def special(self, name: str, value: Any = None) -> Any:
        """Get or set an argument the service handles outside the usual keys."""

        return self._get_set(name, value)

    @property
    def individual(self) -> str:
        return self._individual_id.value

    @individual.setter
    def individual(self, ind_id: Optional[str]) -> None:
        if ind_id:
            self._individual_id.set(ind_id)
            self._arguments["individual"] = ind_id

    @property
    def individual_is_explicit(self) -> bool:
        return self._individual_id.is_explicit

    @property
    def subject(self) -> Optional[str]:
        return self._get("subject")

    @subject.setter
    def subject(self, value: Optional[str]) -> None:
        self._get_set("subject", value)

    @property
    def object(self) -> Optional[str]:
        return self._get("object")

    @object.setter
    def object(self, value: Optional[str]) -> None:
        self._get_set("object", value)

    @property
    def predicate(self) -> Optional[str]:
        return self._get("predicate")

    @predicate.setter
    def predicate(self, value: Optional[str]) -> None:
        self._get_set("predicate", value)

    @property
    def model(self) -> Optional[str]:
        return self._get("model-id")

    @model.setter
    def model(self, value: Optional[str]) -> None:
        self._get_set("model-id", value)

    def set_fact(self, subject: str, obj: str, predicate: str) -> None:
        self.subject = subject
        self.object = obj
        self.predicate = predicate

    def fact_triple(self) -> list[Optional[str]]:
        return [self.subject, self.object, self.predicate]

    def add_annotation(self, key: str, values: Union[str, Iterable[str]]) -> int:
        """Append one ``{key, value}`` pair per value; return the pair count."""

        if isinstance(values, str):
            values = [values]
        elif isinstance(values, (list, tuple)):
            values = list(values)
        else:
            raise InvalidArgumentError(
                f"Annotation values must be a string or a list of strings, "
                f"got {type(values).__name__}."
            )
        pairs = self._ensure_list("values")
        for value in values:
            pairs.append({"key": key, "value": value})
        return len(pairs)

    def annotations(self) -> Optional[list[dict[str, str]]]:
        return self._get("values")

    def _push_expression(self, expr: Any) -> int:
        exprs = self._ensure_list("expressions")
        exprs.append(expr.to_dict())
        return len(exprs)

    def add_class_expression(self, class_expr: ClassExprInput) -> int:
        return self._push_expression(self._adapter.construct(class_expr))

    def add_svf_expression(self, class_expr: ClassExprInput, property_id: str) -> int:
        """Short form for "some values from" additions."""

        return self._push_expression(self._adapter.as_svf(class_expr, property_id))

    def add_set_class_expression(
        self, kind: str, class_exprs: Iterable[ClassExprInput]
    ) -> int:
        return self._push_expression(self._adapter.as_set(kind, class_exprs))

    def expressions(self) -> Optional[list[dict[str, Any]]]:
        return self._get("expressions")

    def to_dict(self, default_model_id: Optional[str] = None) -> dict[str, Any]:
        """Plain structure sent to the service for this request.

        ``default_model_id`` fills ``model-id`` in the output only; the
        request itself is left unchanged.
        """

        arguments = copy.deepcopy(self._arguments)
        if default_model_id and not arguments.get("model-id"):
            arguments["model-id"] = default_model_id
        if self._entity == "individual" and not self._individual_id.is_explicit:
            arguments["assign-to-variable"] = self._individual_id.value
        return {
            "entity": self._entity,
            "operation": self._operation,
            "arguments": arguments,
        }
