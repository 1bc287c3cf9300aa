"""Tests for the logsSubscribe listener."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from src.parsers.solana_rpc.ws_client import ConnectionState, LogsSubscriber, notification_value

FEE_ACCOUNT = "7YttLkHDoNj9wyDur5pM1ejNaAvT9X4eqaYcHQqtj2G5"


def _notification(signature: str, err: object = None) -> dict:
    return {
        "jsonrpc": "2.0",
        "method": "logsNotification",
        "params": {
            "subscription": 42,
            "result": {
                "context": {"slot": 300_000_000},
                "value": {"signature": signature, "err": err, "logs": ["Program log: initialize2"]},
            },
        },
    }


class TestHandleMessage:
    @pytest.mark.asyncio
    async def test_successful_tx_dispatched(self) -> None:
        sub = LogsSubscriber("wss://test", FEE_ACCOUNT)
        sub.on_signature = AsyncMock()

        await sub.handle_message(_notification("sig1"))

        sub.on_signature.assert_awaited_once_with("sig1")

    @pytest.mark.asyncio
    async def test_failed_tx_skipped(self) -> None:
        sub = LogsSubscriber("wss://test", FEE_ACCOUNT)
        sub.on_signature = AsyncMock()

        await sub.handle_message(_notification("sig1", err={"InstructionError": [0, "x"]}))

        sub.on_signature.assert_not_awaited()
        assert sub.skipped_count == 1

    @pytest.mark.asyncio
    async def test_subscription_ack_ignored(self) -> None:
        sub = LogsSubscriber("wss://test", FEE_ACCOUNT)
        sub.on_signature = AsyncMock()

        await sub.handle_message({"jsonrpc": "2.0", "id": 1, "result": 42})

        sub.on_signature.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_callback_error_contained(self) -> None:
        sub = LogsSubscriber("wss://test", FEE_ACCOUNT)
        sub.on_signature = AsyncMock(side_effect=RuntimeError("queue broken"))

        await sub.handle_message(_notification("sig1"))
        await sub.handle_message(_notification("sig2"))

        assert sub.on_signature.await_count == 2

    @pytest.mark.asyncio
    async def test_no_callback(self) -> None:
        sub = LogsSubscriber("wss://test", FEE_ACCOUNT)
        await sub.handle_message(_notification("sig1"))


class TestSubscribe:
    @pytest.mark.asyncio
    async def test_sends_mentions_filter(self) -> None:
        sub = LogsSubscriber("wss://test", FEE_ACCOUNT)
        ws = AsyncMock()
        ws.recv = AsyncMock(return_value=json.dumps({"jsonrpc": "2.0", "id": 1, "result": 7}))
        sub._ws = ws

        await sub._subscribe()

        sent = json.loads(ws.send.await_args.args[0])
        assert sent["method"] == "logsSubscribe"
        assert sent["params"][0] == {"mentions": [FEE_ACCOUNT]}
        assert sent["params"][1] == {"commitment": "confirmed"}
        assert sub._subscription_id == 7

    @pytest.mark.asyncio
    async def test_stop(self) -> None:
        sub = LogsSubscriber("wss://test", FEE_ACCOUNT)
        ws = AsyncMock()
        sub._ws = ws

        await sub.stop()

        ws.close.assert_awaited_once()
        assert sub.state == ConnectionState.DISCONNECTED


class TestNotificationValue:
    def test_extracts_value(self) -> None:
        value = notification_value(_notification("sig1"))
        assert value is not None
        assert value["signature"] == "sig1"

    def test_non_notification(self) -> None:
        assert notification_value({"jsonrpc": "2.0", "id": 1, "result": 42}) is None
        assert notification_value({"params": {"result": None}}) is None


class TestReconnect:
    @pytest.mark.asyncio
    async def test_backoff_doubles_up_to_cap(self) -> None:
        sub = LogsSubscriber("wss://test", FEE_ACCOUNT, min_backoff=5.0, max_backoff=15.0)
        delays: list[float] = []

        async def _fake_sleep(delay: float) -> None:
            delays.append(delay)
            if len(delays) == 3:
                sub._running = False

        with patch(
            "src.parsers.solana_rpc.ws_client.websockets.connect",
            side_effect=OSError("connection refused"),
        ), patch("src.parsers.solana_rpc.ws_client.asyncio.sleep", new=_fake_sleep):
            await sub.connect()

        assert delays == [5.0, 10.0, 15.0]
        assert sub.reconnects == 3
        assert sub.state == ConnectionState.DISCONNECTED
