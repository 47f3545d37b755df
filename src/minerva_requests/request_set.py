"""Ordered request batches and the macro operations that build them.

A request set is a serial queue: requests later in the batch refer to
individuals created earlier in the same batch through the variables their
requests carry. The batch is serialized once and executed by the service
in insertion order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterator, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from minerva_requests.class_expression import ClassExprInput, ClassExpressionAdapter
from minerva_requests.errors import InvalidArgumentError, InvalidOperationError
from minerva_requests.request import FactTriple, Request, TripleInput
from minerva_requests.variable import IdFactory
from minerva_requests.wire import encode_requests


logger = logging.getLogger(__name__)

Intention = Literal["query", "action"]
AnnotationTarget = Literal["model", "individual", "edge"]


@dataclass(frozen=True)
class RequestSetConfig:
    """Batch-level settings shared by every request in a set."""

    token: Optional[str] = None
    model_id: Optional[str] = None
    id_factory: Optional[IdFactory] = None


class ModelSeed(BaseModel):
    """Seeding options for model creation.

    Attributes:
        class_id: Initial class to build the model around (``class-id``).
        taxon_id: Background species (``taxon-id``).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    class_id: Optional[str] = Field(default=None, alias="class-id")
    taxon_id: Optional[str] = Field(default=None, alias="taxon-id")


class RequestSet:
    """Builder for one Minerva batch.

    Intention is handled silently: the batch starts as ``query`` and is
    raised to ``action`` as soon as any mutating request is added. It is
    never lowered again.

    If a model id is given, it is applied at serialization time to every
    request that does not carry one.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        model_id: Optional[str] = None,
        *,
        adapter: Optional[ClassExpressionAdapter] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        self._token = token or None
        self._model_id = model_id or None
        self._adapter = adapter
        self._id_factory = id_factory
        self._requests: list[Request] = []
        self._intention: Intention = "query"

    @classmethod
    def from_config(
        cls,
        config: RequestSetConfig,
        *,
        adapter: Optional[ClassExpressionAdapter] = None,
    ) -> "RequestSet":
        return cls(
            config.token,
            config.model_id,
            adapter=adapter,
            id_factory=config.id_factory,
        )

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def model_id(self) -> Optional[str]:
        return self._model_id

    @property
    def intention(self) -> Intention:
        return self._intention

    @property
    def requests(self) -> tuple[Request, ...]:
        return tuple(self._requests)

    def __len__(self) -> int:
        return len(self._requests)

    def __iter__(self) -> Iterator[Request]:
        return iter(tuple(self._requests))

    def new_request(
        self, entity: str, operation: str, model_id: Optional[str] = None
    ) -> Request:
        """Create a request wired to this set's adapter and id factory.

        The request is not queued; pass it to :meth:`add`.
        """

        req = Request(
            entity,
            operation,
            adapter=self._adapter,
            id_factory=self._id_factory,
        )
        if model_id:
            req.model = model_id
        return req

    def add(self, req: Request, intention: Optional[Intention] = None) -> "RequestSet":
        """Queue a request; the most primitive way to grow the batch.

        Without an explicit intention the request is assumed to be a
        custom mutating operation.
        """

        if intention is None or intention == "action":
            if self._intention != "action":
                logger.debug("Batch intention raised to 'action' by %s/%s",
                             req.entity, req.operation)
            self._intention = "action"
        elif intention != "query":
            raise InvalidArgumentError(f"Unknown intention: {intention!r}")

        self._requests.append(req)
        logger.debug("Queued %s/%s (%d in batch)", req.entity, req.operation,
                     len(self._requests))
        return self

    def _last_of(self, entity: str, skip: int) -> Optional[Request]:
        for req in reversed(self._requests):
            if req.entity != entity:
                continue
            if skip > 0:
                skip -= 1
                continue
            return req
        return None

    def last_individual_id(self, skip: int = 0) -> Optional[str]:
        """Id of the most recent individual request, skipping ``skip`` matches."""

        req = self._last_of("individual", skip)
        return req.individual if req is not None else None

    def last_fact_triple(self, skip: int = 0) -> Optional[list[Optional[str]]]:
        """``[subject, object, predicate]`` of the most recent edge request."""

        req = self._last_of("edge", skip)
        return req.fact_triple() if req is not None else None

    def add_individual(
        self, class_expr: ClassExprInput, model_id: Optional[str] = None
    ) -> Optional[str]:
        """Add an instance of ``class_expr``; returns the new individual's id.

        The id is the request's variable until the service binds it.
        """

        if not class_expr:
            return None
        ind_req = self.new_request("individual", "add", model_id)
        ind_req.add_class_expression(class_expr)
        self.add(ind_req, "action")
        return ind_req.individual

    def remove_individual(
        self, individual_id: str, model_id: Optional[str] = None
    ) -> "RequestSet":
        if individual_id:
            ind_req = self.new_request("individual", "remove", model_id)
            ind_req.individual = individual_id
            self.add(ind_req, "action")
        return self

    def _op_type_to_individual(
        self,
        op: str,
        class_expr: ClassExprInput,
        individual_id: str,
        model_id: Optional[str],
    ) -> "RequestSet":
        if op not in ("add", "remove"):
            raise InvalidOperationError(f"Unknown type operation: {op!r}")
        if class_expr and individual_id:
            type_req = self.new_request("individual", f"{op}-type", model_id)
            type_req.individual = individual_id
            type_req.add_class_expression(class_expr)
            self.add(type_req, "action")
        return self

    def add_type_to_individual(
        self,
        class_expr: ClassExprInput,
        individual_id: str,
        model_id: Optional[str] = None,
    ) -> "RequestSet":
        """Add a type to an individual.

        Several types on one individual are treated as an intersection by
        the service, but are not displayed as one.
        """

        return self._op_type_to_individual("add", class_expr, individual_id, model_id)

    def remove_type_from_individual(
        self,
        class_expr: ClassExprInput,
        individual_id: str,
        model_id: Optional[str] = None,
    ) -> "RequestSet":
        return self._op_type_to_individual("remove", class_expr, individual_id, model_id)

    def _edge_request(
        self, operation: str, triple: TripleInput, model_id: Optional[str]
    ) -> tuple[Request, FactTriple]:
        fact = FactTriple.coerce(triple)
        edge_req = self.new_request("edge", operation, model_id)
        edge_req.set_fact(fact.subject, fact.object, fact.predicate)
        return edge_req, fact

    def add_fact(self, triple: TripleInput, model_id: Optional[str] = None) -> list[str]:
        """Add an edge between two individuals; returns the triple."""

        edge_req, fact = self._edge_request("add", triple, model_id)
        self.add(edge_req, "action")
        return fact.as_list()

    def remove_fact(
        self, triple: TripleInput, model_id: Optional[str] = None
    ) -> "RequestSet":
        edge_req, _ = self._edge_request("remove", triple, model_id)
        self.add(edge_req, "action")
        return self

    def add_evidence(
        self,
        evidence_id: str,
        source_ids: Union[str, list[str]],
        target: Union[str, TripleInput, None],
        model_id: Optional[str] = None,
    ) -> "RequestSet":
        """Attach a floating evidence individual to an individual or a fact.

        ``target`` is an individual id (string) or a fact triple. The
        evidence individual is typed with ``evidence_id`` and annotated
        with one ``source`` pair per source id; the target gets an
        ``evidence`` annotation pointing at it.
        """

        if not (evidence_id and source_ids):
            return self
        if not target:
            raise InvalidArgumentError("No target identified for evidence add.")
        fact = None if isinstance(target, str) else FactTriple.coerce(target)

        ev_req = self.new_request("individual", "add", model_id)
        ev_req.add_class_expression(evidence_id)

        if fact is None:
            ev_req.add_annotation("source", source_ids)
            self.add(ev_req, "action")

            ann_req = self.new_request("individual", "add-annotation", model_id)
            ann_req.individual = target
        else:
            src_req = self.new_request("individual", "add-annotation", model_id)
            src_req.individual = ev_req.individual
            src_req.add_annotation("source", source_ids)
            self.add(ev_req, "action")
            self.add(src_req, "action")

            ann_req = self.new_request("edge", "add-annotation", model_id)
            ann_req.set_fact(fact.subject, fact.object, fact.predicate)

        ann_req.add_annotation("evidence", ev_req.individual)
        self.add(ann_req, "action")
        return self

    def remove_evidence(
        self, evidence_individual_id: str, model_id: Optional[str] = None
    ) -> "RequestSet":
        """Remove an evidence individual.

        The service cleans up the annotations that referenced it.
        """

        return self.remove_individual(evidence_individual_id, model_id)

    def add_evidence_to_last_individual(
        self,
        evidence_id: str,
        source_ids: Union[str, list[str]],
        model_id: Optional[str] = None,
    ) -> "RequestSet":
        ind_id = self.last_individual_id()
        if ind_id:
            self.add_evidence(evidence_id, source_ids, ind_id, model_id)
        return self

    def add_evidence_to_last_fact(
        self,
        evidence_id: str,
        source_ids: Union[str, list[str]],
        model_id: Optional[str] = None,
    ) -> "RequestSet":
        triple = self.last_fact_triple()
        if triple:
            self.add_evidence(evidence_id, source_ids, triple, model_id)
        return self

    def _op_annotation_to_target(
        self,
        op: str,
        target: AnnotationTarget,
        target_identifier: Union[str, TripleInput, None],
        key: str,
        value: Union[str, list[str]],
        model_id: Optional[str],
    ) -> None:
        if op not in ("add", "remove"):
            raise InvalidOperationError(f"Unknown annotation operation: {op!r}")
        if target not in ("model", "individual", "edge"):
            raise InvalidOperationError(f"Unknown annotation target: {target!r}")

        req = self.new_request(target, f"{op}-annotation", model_id)
        if target == "individual":
            req.individual = target_identifier
        elif target == "edge":
            fact = FactTriple.coerce(target_identifier)
            req.set_fact(fact.subject, fact.object, fact.predicate)

        if key and value:
            req.add_annotation(key, value)
            self.add(req, "action")

    def add_annotation_to_model(
        self, key: str, value: str, model_id: Optional[str] = None
    ) -> "RequestSet":
        self._op_annotation_to_target("add", "model", None, key, value, model_id)
        return self

    def remove_annotation_from_model(
        self, key: str, value: str, model_id: Optional[str] = None
    ) -> "RequestSet":
        self._op_annotation_to_target("remove", "model", None, key, value, model_id)
        return self

    def add_annotation_to_individual(
        self, key: str, value: str, individual_id: str, model_id: Optional[str] = None
    ) -> "RequestSet":
        self._op_annotation_to_target(
            "add", "individual", individual_id, key, value, model_id
        )
        return self

    def remove_annotation_from_individual(
        self, key: str, value: str, individual_id: str, model_id: Optional[str] = None
    ) -> "RequestSet":
        self._op_annotation_to_target(
            "remove", "individual", individual_id, key, value, model_id
        )
        return self

    def add_annotation_to_fact(
        self, key: str, value: str, triple: TripleInput, model_id: Optional[str] = None
    ) -> "RequestSet":
        self._op_annotation_to_target("add", "edge", triple, key, value, model_id)
        return self

    def remove_annotation_from_fact(
        self, key: str, value: str, triple: TripleInput, model_id: Optional[str] = None
    ) -> "RequestSet":
        self._op_annotation_to_target("remove", "edge", triple, key, value, model_id)
        return self

    def _model_request(
        self, operation: str, model_id: Optional[str], intention: Intention
    ) -> "RequestSet":
        self.add(self.new_request("model", operation, model_id), intention)
        return self

    def undo_last_model_batch(self, model_id: Optional[str] = None) -> "RequestSet":
        return self._model_request("undo", model_id, "action")

    def redo_last_model_batch(self, model_id: Optional[str] = None) -> "RequestSet":
        return self._model_request("redo", model_id, "action")

    def get_meta(self) -> "RequestSet":
        """Ask for service metadata (relations, evidence codes, ...)."""

        self.add(self.new_request("meta", "get"), "query")
        return self

    def get_model(self, model_id: Optional[str] = None) -> "RequestSet":
        return self._model_request("get", model_id, "query")

    def get_undo_redo(self, model_id: Optional[str] = None) -> "RequestSet":
        return self._model_request("get-undo-redo", model_id, "query")

    def store_model(self, model_id: Optional[str] = None) -> "RequestSet":
        # Storing is not broadcast to other users of the model.
        return self._model_request("store", model_id, "query")

    def add_model(
        self, seed: Union[ModelSeed, Mapping[str, Any], None] = None
    ) -> "RequestSet":
        """Create a new model, optionally seeded with ``class-id``/``taxon-id``."""

        if seed is None:
            seed = ModelSeed()
        elif not isinstance(seed, ModelSeed):
            try:
                seed = ModelSeed.model_validate(dict(seed))
            except (TypeError, ValueError, ValidationError) as exc:
                raise InvalidArgumentError(f"Invalid model seed: {exc}") from exc

        model_req = self.new_request("model", "add")
        if seed.class_id:
            model_req.special("class-id", seed.class_id)
        if seed.taxon_id:
            model_req.special("taxon-id", seed.taxon_id)
        self.add(model_req, "action")
        return self

    def structure(self) -> dict[str, Any]:
        """Plain payload for the service: token, intention and requests."""

        return {
            "token": self._token,
            "intention": self._intention,
            "requests": [req.to_dict(self._model_id) for req in self._requests],
        }

    def callable(self) -> dict[str, Any]:
        """Payload with ``requests`` encoded as a single form-field string."""

        payload = self.structure()
        payload["requests"] = encode_requests(payload["requests"])
        return payload
