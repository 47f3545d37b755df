"""Wire encoding for request batches.

The service receives the batch as flat form fields: ``token``,
``intention`` and ``requests``, where ``requests`` is the JSON text of
the request list, percent-encoded the way ``encodeURIComponent`` does.
"""

from __future__ import annotations

import json
from typing import Any, Literal, Optional
from urllib.parse import quote, unquote

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from minerva_requests.errors import WireFormatError


# Characters encodeURIComponent leaves untouched besides alphanumerics.
URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_requests(requests: list[dict[str, Any]]) -> str:
    text = json.dumps(requests, ensure_ascii=False, separators=(",", ":"))
    try:
        return quote(text, safe=URI_COMPONENT_SAFE)
    except UnicodeEncodeError as exc:
        raise WireFormatError(f"Requests contain text that is not valid UTF-8: {exc}") from exc


def decode_requests(blob: str) -> list[dict[str, Any]]:
    if not isinstance(blob, str):
        raise WireFormatError("Encoded requests must be a string.")
    try:
        text = unquote(blob, errors="strict")
    except UnicodeDecodeError as exc:
        raise WireFormatError(f"Encoded requests are not valid UTF-8: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise WireFormatError(f"Encoded requests are not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise WireFormatError("Encoded requests must decode to a list.")
    return data


class AnnotationPair(BaseModel):
    key: str
    value: str


class WireRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    entity: Literal["model", "individual", "edge", "meta"]
    operation: str = Field(min_length=1)
    arguments: dict[str, Any] = Field(default_factory=dict)

    @field_validator("arguments")
    @classmethod
    def _check_values(cls, arguments: dict[str, Any]) -> dict[str, Any]:
        values = arguments.get("values")
        if values is not None:
            if not isinstance(values, list):
                raise ValueError("'values' must be a list of {key, value} pairs")
            for pair in values:
                try:
                    AnnotationPair.model_validate(pair)
                except ValidationError as exc:
                    raise ValueError(f"bad annotation pair {pair!r}: {exc}") from exc
        expressions = arguments.get("expressions")
        if expressions is not None and not isinstance(expressions, list):
            raise ValueError("'expressions' must be a list")
        return arguments


class WirePayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    token: Optional[str] = None
    intention: Literal["query", "action"]
    requests: list[WireRequest]


def parse_payload(data: dict[str, Any]) -> WirePayload:
    """Validate a ``structure()`` or ``callable()`` payload.

    A string ``requests`` field is decoded first, so both forms validate
    to the same model.
    """

    if not isinstance(data, dict):
        raise WireFormatError("Payload must be a mapping.")
    payload = dict(data)
    if isinstance(payload.get("requests"), str):
        payload["requests"] = decode_requests(payload["requests"])
    try:
        return WirePayload.model_validate(payload)
    except ValidationError as exc:
        raise WireFormatError(f"Invalid request payload: {exc}") from exc
