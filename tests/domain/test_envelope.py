"""Tests for Envelope construction and its factories."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from core.domain.envelope import Envelope, describe_exception
from core.domain.identifiers import RequestId
from core.domain.request import RequestContext


class TestSuccess:
    def test_success_construction(self) -> None:
        envelope = Envelope.success({"id": 1}, request_id=RequestId("abc"))
        assert envelope.ok is True
        assert envelope.data == {"id": 1}
        assert envelope.status_message == ""
        assert envelope.diagnostic is None
        assert envelope.request_id == RequestId("abc")
        assert envelope.http_response is None
        assert envelope.status_code is None

    def test_timestamp_defaults_to_now(self) -> None:
        before = datetime.now(timezone.utc)
        envelope = Envelope.success("payload")
        assert before <= envelope.timestamp <= datetime.now(timezone.utc)

    def test_timestamp_normalized_to_utc(self) -> None:
        local = datetime(2023, 5, 7, 13, 0, tzinfo=timezone(timedelta(hours=2)))
        envelope = Envelope.success("payload", timestamp=local)
        assert envelope.timestamp.utcoffset() == timedelta(0)
        assert envelope.timestamp == local

    def test_success_requires_payload(self) -> None:
        with pytest.raises(ValueError):
            Envelope(ok=True, data=None)

    def test_empty_sequence_is_a_valid_success_payload(self) -> None:
        assert Envelope.success(()).ok is True


class TestError:
    def test_error_construction(self) -> None:
        envelope: Envelope[str] = Envelope.error("404 - Not Found", "raw response")
        assert envelope.ok is False
        assert envelope.data is None
        assert envelope.status_message == "404 - Not Found"
        assert envelope.diagnostic == "raw response"
        assert envelope.timestamp is not None

    def test_error_may_carry_empty_sequence(self) -> None:
        envelope: Envelope[tuple[int, ...]] = Envelope.error("failed", data=())
        assert envelope.data == ()

    def test_failure_cannot_carry_payload(self) -> None:
        with pytest.raises(ValueError, match="must not carry a payload"):
            Envelope.error("failed", data=(1, 2))

    def test_request_context_attached(self) -> None:
        context = RequestContext(
            operation="get_model",
            method="GET",
            url="https://api.example.test/v1/models/ada",
            request_id=RequestId("abc"),
        )
        envelope: Envelope[str] = Envelope.error("failed", request=context)
        assert envelope.request is context

    def test_frozen(self) -> None:
        envelope: Envelope[str] = Envelope.error("failed")
        with pytest.raises(AttributeError):
            envelope.status_message = "ok"  # type: ignore[misc]


class TestFromException:
    def test_message_and_traceback(self) -> None:
        try:
            raise RuntimeError("connection reset")
        except RuntimeError as exc:
            envelope: Envelope[str] = Envelope.from_exception(exc, request_id=RequestId("r-1"))

        assert envelope.ok is False
        assert envelope.status_message == "connection reset"
        assert envelope.diagnostic is not None
        assert "RuntimeError: connection reset" in envelope.diagnostic
        assert "Traceback" in envelope.diagnostic
        assert envelope.request_id == RequestId("r-1")

    def test_message_never_empty(self) -> None:
        assert describe_exception(TimeoutError()) == "TimeoutError"
        envelope: Envelope[str] = Envelope.from_exception(TimeoutError())
        assert envelope.status_message == "TimeoutError"
