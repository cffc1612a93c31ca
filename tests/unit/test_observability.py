from typing import Any

import pytest
from structlog.testing import capture_logs

from aoe4_matchups.core.observability import _redact_obj, trace_adapter, trace_calls


class _Client:
    @trace_adapter
    async def lookup(self, player_id: int, api_key: str | None = None) -> dict[str, Any]:
        return {"player_id": player_id}

    @trace_adapter
    async def explode(self) -> None:
        raise RuntimeError("boom")


@pytest.mark.asyncio
async def test_trace_adapter_returns_result_and_logs_call() -> None:
    client = _Client()

    with capture_logs() as cap:
        result = await client.lookup(42, api_key="super-secret-value")

    assert result == {"player_id": 42}
    events = [e["event"] for e in cap]
    assert events == ["call_started", "call_succeeded"]
    started = cap[0]
    assert started["args"] == [42]
    assert started["kwargs"]["api_key"] != "super-secret-value"
    assert started["layer"] == "adapter"
    assert cap[1]["duration_ms"] >= 0


@pytest.mark.asyncio
async def test_trace_adapter_reraises_and_logs_failure() -> None:
    client = _Client()

    with capture_logs() as cap:
        with pytest.raises(RuntimeError, match="boom"):
            await client.explode()

    failed = [e for e in cap if e["event"] == "call_failed"]
    assert len(failed) == 1
    assert failed[0]["error_type"] == "RuntimeError"
    assert failed[0]["log_level"] == "warning"


def test_trace_calls_rejects_sync_functions() -> None:
    with pytest.raises(TypeError):

        @trace_calls()
        def not_async() -> None:
            return None


def test_redaction_masks_sensitive_keys_recursively() -> None:
    redacted = _redact_obj({"token": "abcdefghijkl", "nested": [{"password": "x"}], "name": "ok"})

    assert redacted["token"] == "abcd…jkl"
    assert redacted["nested"][0]["password"] == "***"
    assert redacted["name"] == "ok"
