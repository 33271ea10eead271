"""Testes do RequestGate: coalescência e throttling por endpoint."""

from __future__ import annotations

import asyncio
import time

import pytest

from api.connectors.backend.gate import RequestGate, coalesce_key

INTERVAL = 0.05


def _counting_call(result: str = "ok", delay: float = 0.01):
    calls = {"count": 0}

    async def _call() -> str:
        calls["count"] += 1
        await asyncio.sleep(delay)
        return result

    return calls, _call


class TestCoalesceKey:
    """Chave (método, path, hash do corpo)."""

    def test_same_inputs_same_key(self) -> None:
        assert coalesce_key("get", "/products?page=1") == coalesce_key("GET", "/products?page=1")

    def test_body_changes_key(self) -> None:
        assert coalesce_key("POST", "/sales", b'{"a":1}') != coalesce_key("POST", "/sales", b'{"a":2}')

    def test_empty_body_equals_no_body(self) -> None:
        assert coalesce_key("GET", "/x", b"") == coalesce_key("GET", "/x", None)


class TestCoalescing:
    """Chamadas concorrentes idênticas compartilham uma tarefa."""

    @pytest.mark.asyncio
    async def test_concurrent_identical_calls_share_one_execution(self) -> None:
        gate = RequestGate(INTERVAL)
        calls, call = _counting_call("products")

        results = await asyncio.gather(
            gate.run("GET", "/products", None, call),
            gate.run("GET", "/products", None, call),
            gate.run("GET", "/products", None, call),
        )

        assert results == ["products"] * 3
        assert calls["count"] == 1
        assert gate.in_flight_count() == 0

    @pytest.mark.asyncio
    async def test_different_bodies_are_not_coalesced(self) -> None:
        gate = RequestGate(0)
        calls, call = _counting_call()
        await asyncio.gather(
            gate.run("POST", "/sales", b'{"total":1}', call),
            gate.run("POST", "/sales", b'{"total":2}', call),
        )
        assert calls["count"] == 2

    @pytest.mark.asyncio
    async def test_failure_is_shared_by_all_waiters(self) -> None:
        gate = RequestGate(INTERVAL)
        calls = {"count": 0}

        async def _fail() -> str:
            calls["count"] += 1
            await asyncio.sleep(0.01)
            raise ValueError("boom")

        results = await asyncio.gather(
            gate.run("GET", "/branches", None, _fail),
            gate.run("GET", "/branches", None, _fail),
            return_exceptions=True,
        )

        assert calls["count"] == 1
        assert all(isinstance(r, ValueError) for r in results)
        assert gate.in_flight_count() == 0

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_shared_call(self) -> None:
        gate = RequestGate(0)
        calls, call = _counting_call("ok", delay=0.05)

        first = asyncio.ensure_future(gate.run("GET", "/x", None, call))
        second = asyncio.ensure_future(gate.run("GET", "/x", None, call))
        await asyncio.sleep(0.01)
        first.cancel()

        assert await second == "ok"
        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_in_flight_visible_while_running(self) -> None:
        gate = RequestGate(0)
        _, call = _counting_call(delay=0.05)
        task = asyncio.ensure_future(gate.run("GET", "/x?a=1", None, call))
        await asyncio.sleep(0.01)
        assert gate.endpoint_state("/x?a=1").in_flight == 1
        await task
        assert gate.endpoint_state("/x?a=1").in_flight == 0


class TestThrottling:
    """Chamadas sequenciais ao mesmo path respeitam o intervalo."""

    @pytest.mark.asyncio
    async def test_sequential_calls_are_spaced(self) -> None:
        gate = RequestGate(INTERVAL)
        starts: list[float] = []

        async def _call() -> None:
            starts.append(time.monotonic())

        await gate.run("GET", "/dashboard/stats", None, _call)
        await gate.run("GET", "/dashboard/stats", None, _call)

        assert starts[1] - starts[0] >= INTERVAL * 0.9

    @pytest.mark.asyncio
    async def test_interval_counts_from_settlement(self) -> None:
        """O intervalo conta a partir do fim da chamada anterior."""
        gate = RequestGate(INTERVAL)
        ends: list[float] = []
        starts: list[float] = []

        async def _slow() -> None:
            starts.append(time.monotonic())
            await asyncio.sleep(INTERVAL)
            ends.append(time.monotonic())

        await gate.run("GET", "/sales", None, _slow)
        await gate.run("GET", "/sales", None, _slow)

        assert starts[1] - ends[0] >= INTERVAL * 0.9

    @pytest.mark.asyncio
    async def test_other_paths_are_independent(self) -> None:
        gate = RequestGate(1.0)
        _, call = _counting_call(delay=0)
        await gate.run("GET", "/a", None, call)
        started = time.monotonic()
        await gate.run("GET", "/b", None, call)
        assert time.monotonic() - started < 0.5

    @pytest.mark.asyncio
    async def test_failed_call_still_records_timestamp(self) -> None:
        gate = RequestGate(INTERVAL)

        async def _fail() -> None:
            raise RuntimeError("x")

        with pytest.raises(RuntimeError):
            await gate.run("GET", "/x", None, _fail)
        assert gate.endpoint_state("/x").last_request_at is not None

    @pytest.mark.asyncio
    async def test_instances_do_not_share_state(self) -> None:
        first = RequestGate(1.0)
        second = RequestGate(1.0)
        _, call = _counting_call(delay=0)
        await first.run("GET", "/x", None, call)
        started = time.monotonic()
        await second.run("GET", "/x", None, call)
        assert time.monotonic() - started < 0.5
        assert second.endpoint_state("/x").last_request_at is not None
