"""logsSubscribe listener for Raydium pool creation.

Every transaction that mentions the pool-creation fee account is a candidate
launch. The listener only hands the signature on; fetching and decoding the
transaction happens in the launch workers.
"""

import asyncio
import json
from collections.abc import Awaitable, Callable
from enum import Enum

import websockets
from loguru import logger

SUBSCRIBE_ACK_TIMEOUT = 10.0


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ACTIVE = "active"


def notification_value(data: dict) -> dict | None:
    """``params.result.value`` of a logsNotification, or None for anything else."""
    params = data.get("params")
    if not isinstance(params, dict):
        return None
    result = params.get("result")
    if not isinstance(result, dict):
        return None
    value = result.get("value")
    return value if isinstance(value, dict) else None


class LogsSubscriber:
    """Single logsSubscribe stream with reconnect and exponential backoff."""

    def __init__(
        self,
        ws_url: str,
        mention: str,
        *,
        min_backoff: float = 5.0,
        max_backoff: float = 60.0,
    ) -> None:
        self._ws_url = ws_url
        self._mention = mention
        self._min_backoff = min_backoff
        self._max_backoff = max_backoff
        self._backoff = min_backoff
        self._ws = None
        self._state = ConnectionState.DISCONNECTED
        self._running = False
        self._subscription_id: int | None = None

        self._message_count = 0
        self._skipped_count = 0
        self._reconnects = 0

        # Must return quickly: it runs inline with the socket reader
        self.on_signature: Callable[[str], Awaitable[object]] | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def message_count(self) -> int:
        return self._message_count

    @property
    def skipped_count(self) -> int:
        return self._skipped_count

    @property
    def reconnects(self) -> int:
        return self._reconnects

    async def connect(self) -> None:
        """Run until stop(); every dropped connection is retried after a backoff."""
        self._running = True
        while self._running:
            self._state = ConnectionState.CONNECTING
            try:
                await self._run_session()
            except (websockets.ConnectionClosed, ConnectionError, OSError, TimeoutError) as e:
                logger.warning(f"[WS] Connection lost: {e}")
            self._state = ConnectionState.DISCONNECTED
            self._ws = None
            self._subscription_id = None
            if not self._running:
                break
            self._reconnects += 1
            logger.info(f"[WS] Reconnecting in {self._backoff:.0f}s (#{self._reconnects})")
            await asyncio.sleep(self._backoff)
            self._backoff = min(self._backoff * 2, self._max_backoff)

    async def _run_session(self) -> None:
        async with websockets.connect(
            self._ws_url,
            ping_interval=30,
            ping_timeout=10,
            close_timeout=5,
        ) as ws:
            self._ws = ws
            self._state = ConnectionState.CONNECTED
            self._backoff = self._min_backoff
            await self._subscribe()
            self._state = ConnectionState.ACTIVE
            logger.info(f"[WS] Watching logs mentioning {self._mention[:8]}...")
            async for raw in ws:
                self._message_count += 1
                try:
                    data = json.loads(raw)
                except json.JSONDecodeError:
                    logger.debug("[WS] Ignoring non-JSON frame")
                    continue
                if isinstance(data, dict):
                    await self.handle_message(data)

    async def _subscribe(self) -> None:
        if self._ws is None:
            return
        request = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "logsSubscribe",
            "params": [
                {"mentions": [self._mention]},
                {"commitment": "confirmed"},
            ],
        }
        await self._ws.send(json.dumps(request))
        try:
            ack = json.loads(
                await asyncio.wait_for(self._ws.recv(), timeout=SUBSCRIBE_ACK_TIMEOUT)
            )
        except (TimeoutError, json.JSONDecodeError) as e:
            logger.warning(f"[WS] No logsSubscribe ack: {e}")
            return
        self._subscription_id = ack.get("result") if isinstance(ack, dict) else None
        logger.debug(f"[WS] logsSubscribe id={self._subscription_id}")

    async def handle_message(self, data: dict) -> None:
        """Pass the signature of a successful notification to ``on_signature``."""
        value = notification_value(data)
        if value is None:
            return
        signature = value.get("signature")
        if not signature:
            return

        if value.get("err") is not None:
            self._skipped_count += 1
            logger.debug(f"[WS] {signature[:16]} failed on-chain, not a launch")
            return

        if self.on_signature is None:
            return
        try:
            await self.on_signature(signature)
        except Exception as e:
            logger.error(f"[WS] on_signature failed for {signature[:16]}: {e}")

    async def stop(self) -> None:
        self._running = False
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
        self._state = ConnectionState.DISCONNECTED
