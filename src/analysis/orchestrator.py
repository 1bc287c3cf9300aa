"""Launch orchestrator: per-event fan-out, failure isolation and record assembly.

Each launch event runs four enrichment branches concurrently:
1. holders: enumerate, distribute, then top-N concentration + bundled wallets
2. risk: Rugcheck report summary
3. dev_holding: developer's share of supply
4. dev_sold: developer sell history

A branch that fails or times out is replaced by its default and listed in
``AnalysisRecord.failed_branches``; the event is never dropped. The record is
built once all four branches settle and handed to the sink exactly once.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from loguru import logger

from src.analysis.bundled_wallets import bundled_holdings
from src.analysis.concentration import analyze_concentration
from src.analysis.developer import developer_has_sold, developer_holding_percentage
from src.analysis.distribution import distribute
from src.analysis.holders import enumerate_holders
from src.analysis.models import (
    ZERO,
    AnalysisRecord,
    BundledHoldingsResult,
    BundledSummary,
    BundledWallet,
    ConcentrationResult,
    ConcentrationSummary,
    DistributionSnapshot,
    EventState,
    LaunchEvent,
)
from src.parsers.exceptions import UpstreamError, UpstreamQueryError
from src.parsers.launch_parser import parse_launch_event
from src.parsers.metrics import PipelineMetrics
from src.parsers.persistence import RecordSink
from src.parsers.rugcheck.client import RugcheckClient
from src.parsers.rugcheck.models import RugcheckSummary
from src.parsers.solana_rpc.client import SolanaRpcClient
from src.utils.logger import event_logger

T = TypeVar("T")

MAX_RETRIES = 2
RETRY_DELAYS = (1.0, 3.0)

BRANCH_HOLDERS = "holders"
BRANCH_RISK = "risk"
BRANCH_DEV_HOLDING = "dev_holding"
BRANCH_DEV_SOLD = "dev_sold"


@dataclass(frozen=True)
class OrchestratorConfig:
    amm_authority: str
    quote_mint: str
    top_n: int = 10
    bundled_threshold_pct: float = 1.0
    high_risk_score: int = 10000
    dev_sold_signature_limit: int = 50
    branch_timeout_sec: float = 45.0
    max_concurrent_requests: int = 8
    max_retries: int = MAX_RETRIES
    retry_delays: tuple[float, ...] = RETRY_DELAYS
    queue_maxsize: int = 1000
    tx_fetch_retries: int = 4
    tx_fetch_initial_delay_sec: float = 2.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.branch_timeout_sec <= 0:
            raise ValueError(f"branch_timeout_sec must be > 0, got {self.branch_timeout_sec}")

    @classmethod
    def from_settings(cls, settings: Any) -> "OrchestratorConfig":
        return cls(
            amm_authority=settings.raydium_amm_authority,
            quote_mint=settings.quote_mint,
            top_n=settings.top_holders_n,
            bundled_threshold_pct=settings.bundled_threshold_pct,
            high_risk_score=settings.high_risk_score,
            dev_sold_signature_limit=settings.dev_sold_signature_limit,
            branch_timeout_sec=settings.branch_timeout_sec,
            max_concurrent_requests=settings.max_concurrent_requests,
            queue_maxsize=settings.queue_maxsize,
            tx_fetch_retries=settings.tx_fetch_retries,
            tx_fetch_initial_delay_sec=settings.tx_fetch_initial_delay_sec,
        )


@dataclass(frozen=True)
class BranchOutcome:
    """Tagged result of one enrichment branch."""

    name: str
    ok: bool
    value: Any = None
    error: str | None = None


@dataclass(frozen=True)
class HolderAnalysis:
    snapshot: DistributionSnapshot
    concentration: ConcentrationResult
    bundled: BundledHoldingsResult


@dataclass(frozen=True)
class ProcessedEvent:
    record: AnalysisRecord
    state: EventState


class LaunchOrchestrator:
    """Runs the per-launch analysis and owns the signature work queue."""

    def __init__(
        self,
        rpc: SolanaRpcClient,
        rugcheck: RugcheckClient,
        sink: RecordSink,
        config: OrchestratorConfig,
        metrics: PipelineMetrics | None = None,
    ) -> None:
        self._rpc = rpc
        self._rugcheck = rugcheck
        self._sink = sink
        self._config = config
        self._metrics = metrics or PipelineMetrics()
        self._upstream = asyncio.Semaphore(config.max_concurrent_requests)
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=config.queue_maxsize)

    @property
    def metrics(self) -> PipelineMetrics:
        return self._metrics

    @property
    def queue_size(self) -> int:
        return self._queue.qsize()

    # ------------------------------------------------------------------
    # Queue / workers
    # ------------------------------------------------------------------

    async def submit(self, signature: str) -> bool:
        """Enqueue a candidate launch signature without waiting for analysis."""
        self._metrics.record_received()
        try:
            self._queue.put_nowait(signature)
        except asyncio.QueueFull:
            self._metrics.record_dropped()
            logger.warning(f"[ORCH] Queue full, dropping {signature[:16]}")
            return False
        return True

    async def run_workers(self, count: int) -> None:
        """Drain the queue with ``count`` parallel workers until cancelled."""
        workers = [
            asyncio.create_task(self._worker_loop(i), name=f"launch_worker_{i}")
            for i in range(count)
        ]
        try:
            await asyncio.gather(*workers)
        finally:
            for task in workers:
                task.cancel()

    async def join(self) -> None:
        await self._queue.join()

    async def _worker_loop(self, worker_id: int) -> None:
        while True:
            signature = await self._queue.get()
            try:
                await self.handle_signature(signature)
            except Exception as e:
                logger.error(f"[ORCH] worker {worker_id} failed on {signature[:16]}: {e}")
            finally:
                self._queue.task_done()

    # ------------------------------------------------------------------
    # Per-signature pipeline
    # ------------------------------------------------------------------

    async def handle_signature(self, signature: str) -> ProcessedEvent | None:
        """Fetch and decode the transaction, then analyse it if it is a launch."""
        try:
            tx = await self._rpc.wait_for_transaction(
                signature,
                retries=self._config.tx_fetch_retries,
                initial_delay=self._config.tx_fetch_initial_delay_sec,
            )
        except UpstreamError as e:
            self._metrics.record_skipped()
            logger.warning(f"[ORCH] Transaction {signature[:16]} unavailable: {e}")
            return None

        if tx is None:
            self._metrics.record_skipped()
            logger.warning(f"[ORCH] Transaction {signature[:16]} not indexed, skipping")
            return None

        event = parse_launch_event(
            tx,
            amm_authority=self._config.amm_authority,
            quote_mint=self._config.quote_mint,
        )
        if event is None:
            self._metrics.record_skipped()
            return None

        return await self.process_event(event)

    async def process_event(self, event: LaunchEvent) -> ProcessedEvent:
        started = time.monotonic()
        self._transition(event, EventState.DETECTED)
        logger.info(
            f"[ORCH] Launch {event.base_mint[:12]} by {event.creator[:8]} "
            f"(sig {event.signature[:16]})"
        )

        self._transition(event, EventState.ENRICHING)
        mint, creator = event.base_mint, event.creator
        outcomes = await asyncio.gather(
            self._run_branch(BRANCH_HOLDERS, event, lambda: self._analyze_holders(mint)),
            self._run_branch(
                BRANCH_RISK,
                event,
                lambda: self._with_retries(lambda: self._rugcheck.get_report_summary(mint)),
            ),
            self._run_branch(
                BRANCH_DEV_HOLDING,
                event,
                lambda: self._with_retries(
                    lambda: developer_holding_percentage(self._rpc, creator, mint)
                ),
            ),
            self._run_branch(
                BRANCH_DEV_SOLD,
                event,
                lambda: self._with_retries(
                    lambda: developer_has_sold(
                        self._rpc,
                        creator,
                        mint,
                        limit=self._config.dev_sold_signature_limit,
                    )
                ),
            ),
        )

        record = self.assemble(event, {o.name: o for o in outcomes})
        self._transition(event, EventState.ASSEMBLED)

        latency_ms = (time.monotonic() - started) * 1000
        try:
            await asyncio.wait_for(
                self._sink.store(record), timeout=self._config.branch_timeout_sec
            )
        except Exception as e:
            if isinstance(e, TimeoutError):
                reason = f"timeout after {self._config.branch_timeout_sec}s"
            else:
                reason = f"{type(e).__name__}: {e}"
            logger.error(f"[ORCH] Sink rejected {event.signature[:16]}: {reason}")
            self._metrics.record_event(latency_ms, partial=record.is_partial, sink_error=True)
            self._transition(event, EventState.FAILED)
            return ProcessedEvent(record=record, state=EventState.FAILED)

        self._metrics.record_event(latency_ms, partial=record.is_partial)
        final = EventState.FAILED if record.is_partial else EventState.DELIVERED
        self._transition(event, final)
        logger.info(
            f"[ORCH] {event.base_mint[:12]}: top{record.concentration.top_n}="
            f"{record.concentration.top_n_percentage:.2f}% "
            f"bundled={record.bundled_holdings.bundled_percentage:.2f}% "
            f"risk={record.risk_flag} dev={record.developer_holding_percentage:.2f}% "
            f"sold={record.developer_has_sold}"
            + (f" degraded={','.join(record.failed_branches)}" if record.is_partial else "")
        )
        return ProcessedEvent(record=record, state=final)

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    async def _analyze_holders(self, mint: str) -> HolderAnalysis:
        records = await self._with_retries(lambda: enumerate_holders(self._rpc, mint))
        snapshot = distribute(records)
        return HolderAnalysis(
            snapshot=snapshot,
            concentration=analyze_concentration(snapshot, self._config.top_n),
            bundled=bundled_holdings(snapshot, self._config.bundled_threshold_pct),
        )

    async def _with_retries(self, call: Callable[[], Awaitable[T]]) -> T:
        """Run an upstream call under the concurrency limit, retrying query errors."""
        delays = self._config.retry_delays
        attempt = 0
        while True:
            try:
                async with self._upstream:
                    return await call()
            except UpstreamQueryError as e:
                if attempt >= self._config.max_retries:
                    raise
                delay = delays[min(attempt, len(delays) - 1)] if delays else 0.0
                logger.debug(f"[ORCH] {e}, retry in {delay}s")
                await asyncio.sleep(delay)
                attempt += 1

    async def _run_branch(
        self,
        name: str,
        event: LaunchEvent,
        call: Callable[[], Awaitable[Any]],
    ) -> BranchOutcome:
        started = time.monotonic()
        timed_out = False
        try:
            value = await asyncio.wait_for(call(), timeout=self._config.branch_timeout_sec)
            outcome = BranchOutcome(name=name, ok=True, value=value)
        except TimeoutError:
            timed_out = True
            outcome = BranchOutcome(
                name=name, ok=False, error=f"timeout after {self._config.branch_timeout_sec}s"
            )
        except UpstreamError as e:
            outcome = BranchOutcome(name=name, ok=False, error=f"{type(e).__name__}: {e}")
        except Exception as e:
            logger.exception(f"[ORCH] Unexpected error in {name} for {event.signature[:16]}")
            outcome = BranchOutcome(name=name, ok=False, error=f"{type(e).__name__}: {e}")

        self._metrics.record_branch(
            name, (time.monotonic() - started) * 1000, ok=outcome.ok, timed_out=timed_out
        )
        if not outcome.ok:
            event_logger(event.signature, event.base_mint).bind(branch=name).warning(
                f"[ORCH] {name} failed for {event.base_mint[:12]}, using default: {outcome.error}"
            )
        return outcome

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def assemble(self, event: LaunchEvent, outcomes: dict[str, BranchOutcome]) -> AnalysisRecord:
        """Merge branch outcomes into one record, substituting defaults for failures."""
        failed = [
            name
            for name in (BRANCH_HOLDERS, BRANCH_RISK, BRANCH_DEV_HOLDING, BRANCH_DEV_SOLD)
            if not outcomes.get(name, BranchOutcome(name=name, ok=False)).ok
        ]

        risk_flag: bool | None = None
        risk_score: int | None = None
        risk = outcomes.get(BRANCH_RISK)
        if risk is not None and risk.ok and isinstance(risk.value, RugcheckSummary):
            risk_score = risk.value.score
            risk_flag = risk.value.is_high_risk(self._config.high_risk_score)

        dev_holding = outcomes.get(BRANCH_DEV_HOLDING)
        dev_pct = dev_holding.value if dev_holding is not None and dev_holding.ok else ZERO

        dev_sold = outcomes.get(BRANCH_DEV_SOLD)
        has_sold = bool(dev_sold.value) if dev_sold is not None and dev_sold.ok else False

        holders = outcomes.get(BRANCH_HOLDERS)
        if holders is not None and holders.ok:
            analysis: HolderAnalysis = holders.value
        else:
            empty = distribute([])
            analysis = HolderAnalysis(
                snapshot=empty,
                concentration=analyze_concentration(empty, self._config.top_n),
                bundled=bundled_holdings(empty, self._config.bundled_threshold_pct),
            )

        return AnalysisRecord(
            signature=event.signature,
            creator=event.creator,
            base_mint=event.base_mint,
            base_decimals=event.base_decimals,
            base_liquidity_amount=event.base_liquidity_amount,
            timestamp=event.timestamp,
            risk_flag=risk_flag,
            risk_score=risk_score,
            developer_holding_percentage=dev_pct,
            developer_has_sold=has_sold,
            holder_count=analysis.snapshot.holder_count,
            total_supply=analysis.snapshot.total_supply,
            concentration=ConcentrationSummary(
                top_n=analysis.concentration.n,
                top_n_percentage=analysis.concentration.top_n_percentage,
                determined=analysis.concentration.determined,
            ),
            bundled_holdings=BundledSummary(
                threshold_pct=analysis.bundled.threshold,
                total_bundled_amount=analysis.bundled.total_bundled_amount,
                bundled_percentage=analysis.bundled.bundled_percentage,
                bundled_wallets=[
                    BundledWallet(
                        address=h.address,
                        owner=h.owner,
                        amount=h.amount,
                        percentage=h.percentage,
                    )
                    for h in analysis.bundled.bundled_wallets
                ],
            ),
            failed_branches=failed,
        )

    @staticmethod
    def _transition(event: LaunchEvent, state: EventState) -> None:
        event_logger(event.signature, event.base_mint).bind(stage=state.value).debug(
            f"[ORCH] {event.signature[:16]} → {state.value}"
        )
