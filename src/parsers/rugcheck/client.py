"""Rugcheck.xyz API client: external risk score for Solana tokens."""

import httpx
from loguru import logger

from src.parsers.exceptions import MalformedDataError, UpstreamQueryError
from src.parsers.rate_limiter import RateLimiter
from src.parsers.rugcheck.models import RugcheckRisk, RugcheckSummary

BASE_URL = "https://api.rugcheck.xyz/v1"


class RugcheckClient:
    """Async HTTP client for Rugcheck.xyz (free, no API key).

    Single attempt per call; retry policy belongs to the caller.
    """

    def __init__(
        self,
        base_url: str = BASE_URL,
        max_rps: float = 2.0,
        timeout: float = 15.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def get_report_summary(self, mint: str) -> RugcheckSummary | None:
        """Fetch the token report summary.

        Returns None if Rugcheck has no report for the mint (404).
        """
        url = f"{self._base_url}/tokens/{mint}/report/summary"

        await self._rate_limiter.acquire()
        try:
            resp = await self._client.get(url)
        except httpx.HTTPError as e:
            raise UpstreamQueryError(f"rugcheck: {type(e).__name__}: {e}") from e

        if resp.status_code == 404:
            logger.debug(f"[RUGCHECK] No report for {mint[:12]}")
            return None
        if resp.status_code != 200:
            raise UpstreamQueryError(f"rugcheck: HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedDataError("rugcheck: invalid JSON body") from e
        return _parse_summary(data, mint)


def _parse_summary(data: object, mint: str) -> RugcheckSummary:
    """Parse raw JSON into RugcheckSummary."""
    if not isinstance(data, dict):
        raise MalformedDataError(f"rugcheck: expected object, got {type(data).__name__}")

    score = data.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise MalformedDataError(f"rugcheck: score is {score!r}")

    risks = []
    for risk_data in data.get("risks") or []:
        if not isinstance(risk_data, dict):
            continue
        risks.append(RugcheckRisk(
            name=risk_data.get("name", "unknown"),
            description=risk_data.get("description", ""),
            level=risk_data.get("level", "info"),
            score=int(risk_data.get("score", 0) or 0),
        ))

    return RugcheckSummary(mint=mint, score=int(score), risks=risks)
