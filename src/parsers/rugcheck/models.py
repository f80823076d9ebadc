"""Pydantic models for the Rugcheck.xyz token report."""

from pydantic import BaseModel

DANGER = "danger"


class RugcheckRisk(BaseModel):
    name: str
    description: str = ""
    level: str = "info"  # info | warn | danger
    score: int = 0

    @property
    def is_danger(self) -> bool:
        return self.level == DANGER


class RugcheckReport(BaseModel):
    """Summary for one mint. score: normalised 0 (safest) to 100."""

    mint: str = ""
    score: int = 0
    risks: list[RugcheckRisk] = []
    rugged: bool = False
    top_holders_pct: float | None = None  # combined share of the top 10 holders
    creator_pct: float | None = None  # creator balance as a share of supply

    @property
    def risk_names(self) -> list[str]:
        return [r.name for r in self.risks]

    @property
    def danger_count(self) -> int:
        return sum(1 for r in self.risks if r.is_danger)
