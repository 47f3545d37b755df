"""Request batch construction for the Minerva model-editing service."""

from minerva_requests.class_expression import (
    ClassExpressionAdapter,
    ClassRef,
    ClassSet,
    DefaultClassExpressionAdapter,
    SomeValuesFrom,
)
from minerva_requests.errors import (
    InvalidArgumentError,
    InvalidOperationError,
    RequestError,
    WireFormatError,
)
from minerva_requests.request import FactTriple, Request
from minerva_requests.request_set import ModelSeed, RequestSet, RequestSetConfig
from minerva_requests.variable import RequestVariable, new_variable_id, sequential_ids
from minerva_requests.wire import decode_requests, encode_requests, parse_payload

__all__ = [
    "ClassExpressionAdapter",
    "ClassRef",
    "ClassSet",
    "DefaultClassExpressionAdapter",
    "SomeValuesFrom",
    "InvalidArgumentError",
    "InvalidOperationError",
    "RequestError",
    "WireFormatError",
    "FactTriple",
    "Request",
    "ModelSeed",
    "RequestSet",
    "RequestSetConfig",
    "RequestVariable",
    "new_variable_id",
    "sequential_ids",
    "decode_requests",
    "encode_requests",
    "parse_payload",
]
