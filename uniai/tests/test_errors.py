from __future__ import annotations

import types

import httpx
import pytest

from uniai.base.errors import (
    ConfigError,
    ErrorCode,
    ProviderError,
    UniAIError,
    UnknownToolError,
    classify_exception,
    classify_status,
    provider_error_from_status,
    wrap_exception,
)


def test_classify_passthrough_for_own_errors():
    e = ProviderError(code=ErrorCode.AUTH, message="nope", provider="x")
    assert classify_exception(e) is ErrorCode.AUTH  # nosec B101


def test_classify_http_status_mapping():
    e1 = types.SimpleNamespace(status_code=404)
    assert classify_exception(e1) is ErrorCode.NOT_FOUND  # nosec B101
    e2 = types.SimpleNamespace(response=types.SimpleNamespace(status_code=503))
    assert classify_exception(e2) is ErrorCode.UNAVAILABLE  # nosec B101


@pytest.mark.parametrize(
    "status, code",
    [(401, ErrorCode.AUTH), (429, ErrorCode.RATE_LIMIT), (500, ErrorCode.SERVER_ERROR), (599, ErrorCode.SERVER_ERROR), (418, ErrorCode.PROVIDER), (None, ErrorCode.UNKNOWN)],
)
def test_classify_status(status, code):
    assert classify_status(status) is code  # nosec B101


def test_transport_errors():
    assert classify_exception(httpx.ReadTimeout("slow")) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(httpx.ConnectError("refused")) is ErrorCode.TRANSIENT  # nosec B101
    assert classify_exception(ValueError("random")) is ErrorCode.UNKNOWN  # nosec B101


def test_wrap_keeps_own_errors_and_sdk_body():
    own = ConfigError(message="missing key")
    assert wrap_exception(own, provider="p", model="m") is own  # nosec B101

    sdk_error = types.SimpleNamespace(status_code=429, body={"error": {"message": "slow down"}})
    wrapped = wrap_exception(sdk_error, provider="p", model="m")  # type: ignore[arg-type]
    assert isinstance(wrapped, ProviderError)  # nosec B101
    assert wrapped.code is ErrorCode.RATE_LIMIT  # nosec B101
    assert wrapped.retryable is True  # nosec B101
    assert wrapped.raw == {"error": {"message": "slow down"}}  # nosec B101


def test_unclassified_failures_become_provider_code():
    wrapped = wrap_exception(RuntimeError("boom"), provider="p", model=None)
    assert wrapped.code is ErrorCode.PROVIDER  # nosec B101
    assert wrapped.message == "boom"  # nosec B101


def test_status_error_message_prefers_vendor_envelope():
    err = provider_error_from_status(400, {"error": {"message": "bad field"}}, provider="p", model="m")
    assert err.message == "HTTP 400: bad field"  # nosec B101
    assert err.status_code == 400  # nosec B101
    long_body = "x" * 600
    assert provider_error_from_status(502, long_body, provider="p", model="m").message.endswith("...")  # nosec B101


def test_str_and_dict_views():
    err = UnknownToolError(message="unknown tool 'x'", provider="p", model="m", stage="decision", tool_name="x")
    assert isinstance(err, UniAIError)  # nosec B101
    assert str(err) == "p:m unknown_tool[decision]: unknown tool 'x'"  # nosec B101
    assert err.to_dict()["error"] == "UnknownToolError"  # nosec B101
