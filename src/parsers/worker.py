"""Main monitor worker: wires the launch pipeline together.

Runs parallel async tasks:
1. logsSubscribe WebSocket on the Raydium fee account (enqueue only)
2. Launch workers: fetch tx, build LaunchEvent, fan out enrichment, persist
3. Stats reporter: periodic logging of pipeline health
"""

import asyncio

from loguru import logger

from config.settings import Settings
from src.analysis.orchestrator import LaunchOrchestrator, OrchestratorConfig
from src.db.database import create_engine, create_session_factory
from src.parsers.metrics import PipelineMetrics
from src.parsers.persistence import DatabaseSink, JsonLinesSink, RecordSink
from src.parsers.rate_limiter import RateLimiter
from src.parsers.rugcheck.client import RugcheckClient
from src.parsers.solana_rpc.client import SolanaRpcClient
from src.parsers.solana_rpc.ws_client import LogsSubscriber


async def build_sink(settings: Settings) -> RecordSink:
    if settings.database_url:
        engine = create_engine(settings.database_url)
        sink = DatabaseSink(engine, create_session_factory(engine))
        await sink.init()
        logger.info("[SINK] Persisting to database")
        return sink
    logger.info(f"[SINK] Persisting to {settings.output_path}")
    return JsonLinesSink(settings.output_path)


async def run_monitor(settings: Settings) -> None:
    """Start the subscriber, workers and stats reporter; run until cancelled."""
    rpc = SolanaRpcClient(settings.rpc_url, rate_limiter=RateLimiter(settings.rpc_max_rps))
    rugcheck = RugcheckClient(
        base_url=settings.rugcheck_base_url, max_rps=settings.rugcheck_max_rps
    )
    sink = await build_sink(settings)
    metrics = PipelineMetrics()
    orchestrator = LaunchOrchestrator(
        rpc,
        rugcheck,
        sink,
        OrchestratorConfig.from_settings(settings),
        metrics=metrics,
    )

    subscriber = LogsSubscriber(settings.ws_url, settings.raydium_fee_account)
    subscriber.on_signature = orchestrator.submit

    tasks = [
        asyncio.create_task(subscriber.connect(), name="logs_subscriber"),
        asyncio.create_task(
            orchestrator.run_workers(settings.analysis_workers), name="launch_workers"
        ),
        asyncio.create_task(
            _stats_reporter(subscriber, orchestrator, settings.stats_interval_sec),
            name="stats",
        ),
    ]
    logger.info(
        f"Monitoring Raydium launches: {settings.analysis_workers} workers, "
        f"{settings.max_concurrent_requests} concurrent upstream calls"
    )

    try:
        await asyncio.gather(*tasks)
    finally:
        for task in tasks:
            task.cancel()
        await subscriber.stop()
        await rpc.close()
        await rugcheck.close()
        await sink.close()
        logger.info(f"[STATS] Final: {metrics.format_stats_line()}")


async def _stats_reporter(
    subscriber: LogsSubscriber,
    orchestrator: LaunchOrchestrator,
    interval_sec: int,
) -> None:
    """Log pipeline stats every ``interval_sec`` seconds."""
    while True:
        await asyncio.sleep(interval_sec)
        parts = [
            f"WS messages: {subscriber.message_count}",
            f"WS state: {subscriber.state.value}",
            f"WS reconnects: {subscriber.reconnects}",
            f"Queue: {orchestrator.queue_size}",
            orchestrator.metrics.format_stats_line(),
        ]
        logger.info(f"[STATS] {' | '.join(parts)}")
