"""Decoding of raw HTTP responses into `Envelope` values.

Both entry points are the failure boundary of a remote call: they never
raise. Empty bodies, non-success status codes, malformed JSON and parser
exceptions all come back as failed envelopes that keep the raw response
for diagnosis.

The array variant tolerates partial failures: every element of `data` is
parsed on its own, broken elements are skipped and their error messages are
joined into the envelope's diagnostic while the call still succeeds.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, TypeVar

import structlog
from pydantic import TypeAdapter

from core.domain.envelope import Envelope, describe_exception
from core.domain.errors import FormatError
from core.domain.identifiers import RequestId
from core.domain.models import to_utc
from core.domain.request import RequestContext
from core.interfaces.transport import RawResponse

T = TypeVar("T")

JSONParser = Callable[[Mapping[str, Any]], T]

REQUEST_ID_HEADER = "x-request-id"
SUCCESS_STATUS_CODES = frozenset({200, 201})

_DATETIME = TypeAdapter(datetime)

logger = structlog.get_logger(__name__)


def remote_request_id(response: RawResponse, fallback: RequestId) -> RequestId:
    """Correlation id from `x-request-id`, or `fallback` if absent/unparsable."""

    remote = RequestId.try_parse(response.headers.get(REQUEST_ID_HEADER))
    return remote if remote is not None else fallback


def _load_object(response: RawResponse) -> dict[str, Any]:
    payload = json.loads(response.text)
    if not isinstance(payload, dict):
        raise FormatError("The response body is not a JSON object.")
    return payload


def _json_timestamp(payload: Mapping[str, Any]) -> datetime | None:
    raw = payload.get("timestamp")
    if raw is None:
        return None
    return to_utc(_DATETIME.validate_python(raw))


def _empty_body_message(response: RawResponse) -> str:
    return f"{response.status_code} - {response.reason_phrase}"


def decode_object(
    response: RawResponse,
    fallback_request_id: RequestId,
    parser: JSONParser[T],
    *,
    request: RequestContext | None = None,
) -> Envelope[T]:
    """Decode a single JSON object response."""

    request_id = fallback_request_id
    try:
        request_id = remote_request_id(response, fallback_request_id)

        if not response.content:
            return Envelope.error(
                _empty_body_message(response),
                response.entire_pdu,
                response.timestamp,
                response,
                request_id,
                request=request,
            )

        payload = _load_object(response)
        timestamp = _json_timestamp(payload)

        if response.status_code in SUCCESS_STATUS_CODES:
            return Envelope.success(
                parser(payload),
                timestamp=timestamp,
                http_response=response,
                request_id=request_id,
                request=request,
            )

        return Envelope.error(
            "",
            response.entire_pdu,
            timestamp,
            response,
            request_id,
            request=request,
        )

    except Exception as exc:
        logger.warning(
            "response.decode_failed",
            request_id=request_id,
            status_code=getattr(response, "status_code", None),
            error=describe_exception(exc),
        )
        return Envelope.from_exception(exc, None, response, request_id, request=request)


def decode_array(
    response: RawResponse,
    fallback_request_id: RequestId,
    parser: JSONParser[T],
    *,
    request: RequestContext | None = None,
) -> Envelope[tuple[T, ...]]:
    """Decode a `{"data": [...]}` collection response, keeping every good item."""

    empty: tuple[T, ...] = ()
    request_id = fallback_request_id
    try:
        request_id = remote_request_id(response, fallback_request_id)

        if not response.content:
            return Envelope.error(
                _empty_body_message(response),
                response.entire_pdu,
                response.timestamp,
                response,
                request_id,
                request=request,
                data=empty,
            )

        payload = _load_object(response)
        timestamp = _json_timestamp(payload)
        status_message = payload.get("status_message")
        if not isinstance(status_message, str):
            status_message = ""

        if response.status_code not in SUCCESS_STATUS_CODES:
            return Envelope.error(
                status_message,
                response.entire_pdu,
                timestamp,
                response,
                request_id,
                request=request,
                data=empty,
            )

        items: list[T] = []
        errors: list[str] = []
        elements = payload.get("data")
        if isinstance(elements, list):
            for index, element in enumerate(elements):
                try:
                    if not isinstance(element, Mapping):
                        raise FormatError(f"Element {index} of 'data' is not a JSON object.")
                    items.append(parser(element))
                except Exception as exc:
                    errors.append(describe_exception(exc))

        if errors:
            logger.info(
                "response.partial_items",
                request_id=request_id,
                parsed=len(items),
                failed=len(errors),
            )

        return Envelope.success(
            tuple(items),
            status_message=status_message,
            diagnostic="\n".join(errors) if errors else None,
            timestamp=timestamp,
            http_response=response,
            request_id=request_id,
            request=request,
        )

    except Exception as exc:
        logger.warning(
            "response.decode_failed",
            request_id=request_id,
            status_code=getattr(response, "status_code", None),
            error=describe_exception(exc),
        )
        return Envelope.from_exception(exc, None, response, request_id, request=request, data=empty)


__all__ = [
    "JSONParser",
    "REQUEST_ID_HEADER",
    "SUCCESS_STATUS_CODES",
    "decode_array",
    "decode_object",
    "remote_request_id",
]
