"""Pydantic models for Rugcheck.xyz API responses."""

from pydantic import BaseModel


class RugcheckRisk(BaseModel):
    """Individual risk detected by Rugcheck."""

    name: str
    description: str = ""
    level: str = "info"  # "warn", "danger", "info"
    score: int = 0


class RugcheckSummary(BaseModel):
    """Summary report from /tokens/{mint}/report/summary.

    score: aggregate of risk scores, unbounded; higher = more dangerous.
    """

    mint: str = ""
    score: int = 0
    risks: list[RugcheckRisk] = []

    def is_high_risk(self, threshold: int) -> bool:
        return self.score >= threshold
