"""Tests for monitor wiring: settings and sink selection."""

import pytest

from config.settings import Settings
from src.analysis.orchestrator import OrchestratorConfig
from src.parsers.persistence import DatabaseSink, JsonLinesSink
from src.parsers.worker import build_sink


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


class TestSettings:
    def test_helius_fallback(self) -> None:
        s = _settings(helius_api_key="abc")
        assert s.rpc_url == "https://mainnet.helius-rpc.com/?api-key=abc"
        assert s.ws_url == "wss://mainnet.helius-rpc.com/?api-key=abc"

    def test_explicit_urls_win(self) -> None:
        s = _settings(
            helius_api_key="abc",
            solana_rpc_url="http://localhost:8899",
            solana_ws_url="ws://localhost:8900",
        )
        assert s.rpc_url == "http://localhost:8899"
        assert s.ws_url == "ws://localhost:8900"

    def test_orchestrator_config_defaults(self) -> None:
        config = OrchestratorConfig.from_settings(_settings())
        assert config.top_n == 10
        assert config.bundled_threshold_pct == 1.0
        assert config.amm_authority == "5Q544fKrFoe6tsEbD7S8EmxGTJYAKtTVhAW5Q5pge4j1"
        assert config.quote_mint == "So11111111111111111111111111111111111111112"


class TestBuildSink:
    @pytest.mark.asyncio
    async def test_file_sink_by_default(self, tmp_path) -> None:
        sink = await build_sink(_settings(output_path=str(tmp_path / "out.jsonl")))
        assert isinstance(sink, JsonLinesSink)
        assert sink.path == tmp_path / "out.jsonl"

    @pytest.mark.asyncio
    async def test_database_sink_when_url_set(self, tmp_path) -> None:
        url = f"sqlite+aiosqlite:///{tmp_path / 'launches.db'}"
        sink = await build_sink(_settings(database_url=url))
        try:
            assert isinstance(sink, DatabaseSink)
        finally:
            await sink.close()
