"""Entry point for the Raydium launch monitor."""

import asyncio
import signal
from urllib.parse import urlsplit

from loguru import logger

from config.settings import Settings, settings
from src.parsers.worker import run_monitor
from src.utils.logger import setup_logger


def _install_shutdown_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()

    def _on_signal(signame: str) -> None:
        logger.info(f"{signame} received, shutting down")
        stop.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _on_signal, sig.name)


async def _cancel_all(tasks: set[asyncio.Task]) -> None:
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


def _describe(cfg: Settings) -> str:
    # Host only: the Helius URL carries the API key in its query string
    return (
        f"rpc={urlsplit(cfg.rpc_url).hostname} ws={urlsplit(cfg.ws_url).hostname} "
        f"sink={'database' if cfg.database_url else cfg.output_path} "
        f"top_n={cfg.top_holders_n} bundled>={cfg.bundled_threshold_pct}% "
        f"high_risk>={cfg.high_risk_score}"
    )


async def main() -> None:
    setup_logger(json_logs=settings.json_logs, level=settings.log_level, log_dir=settings.log_dir)
    logger.info(f"Starting launch-radar ({_describe(settings)})")

    stop = asyncio.Event()
    _install_shutdown_handlers(stop)

    monitor = asyncio.create_task(run_monitor(settings), name="monitor")
    stopper = asyncio.create_task(stop.wait(), name="shutdown")
    done, pending = await asyncio.wait({monitor, stopper}, return_when=asyncio.FIRST_COMPLETED)
    await _cancel_all(pending)

    if monitor in done and not monitor.cancelled() and monitor.exception() is not None:
        logger.opt(exception=monitor.exception()).error("Monitor stopped with error")

    logger.info("Shutdown complete")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
