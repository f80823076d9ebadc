"""Pydantic v2 models for the graduation stream and its output feed."""

import time
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel

from src.parsers.graduation.constants import WSOL_MINT

UNKNOWN_SYMBOL = "UNKNOWN"
UNKNOWN_NAME = "Unknown Token"


class LogNotification(BaseModel):
    """``logsNotification`` payload value: one transaction's program logs."""

    signature: str | None = None
    logs: list[str] = []
    err: Any | None = None
    slot: int | None = None

    model_config = {"extra": "ignore"}

    @classmethod
    def from_message(cls, data: dict) -> "LogNotification | None":
        """Extract the notification from a raw WS message, or None if it is not one.

        Shape: {"method": "logsNotification", "params": {"result": {"context": {...}, "value": {...}}}}
        """
        if data.get("method") != "logsNotification":
            return None
        params = data.get("params")
        result = params.get("result") if isinstance(params, dict) else None
        value = result.get("value") if isinstance(result, dict) else None
        if not isinstance(value, dict):
            return None
        notification = cls.model_validate(value)
        context = result.get("context")
        if notification.slot is None and isinstance(context, dict):
            notification.slot = context.get("slot")
        return notification

    @property
    def text(self) -> str:
        return "\n".join(self.logs)


class TokenMetadata(BaseModel):
    """Descriptive + market fields normalized from any metadata source."""

    symbol: str = UNKNOWN_SYMBOL
    name: str = UNKNOWN_NAME
    logo: str | None = None
    website: str | None = None
    twitter: str | None = None
    telegram: str | None = None
    price_usd: float = 0.0
    liquidity_usd: float = 0.0
    market_cap_usd: float = 0.0
    price_change_m5: float = 0.0
    price_change_h1: float = 0.0
    source: str | None = None  # None = placeholder, every source failed

    model_config = {"extra": "ignore"}


class RiskSummary(BaseModel):
    """Rugcheck summary attached to a record when available."""

    score: int = 0
    risks: list[str] = []
    rugged: bool = False
    top_holders_pct: float | None = None
    creator_pct: float | None = None


class GraduationRecord(BaseModel):
    """One finalized graduation. Immutable; age is derived at read time."""

    mint: str
    symbol: str = UNKNOWN_SYMBOL
    name: str = UNKNOWN_NAME
    liquidity_usd: float = 0.0
    price_usd: float = 0.0
    market_cap_usd: float = 0.0
    price_change_m5: float = 0.0
    price_change_h1: float = 0.0
    logo: str | None = None
    website: str | None = None
    twitter: str | None = None
    telegram: str | None = None
    graduated_at: str
    detected_at_ms: int
    signature: str
    source: str
    metadata_source: str | None = None
    extraction_method: str | None = None
    risk: RiskSummary | None = None

    model_config = {"frozen": True}

    @classmethod
    def build(
        cls,
        *,
        mint: str,
        signature: str,
        source: str,
        metadata: TokenMetadata | None,
        detected_at: float | None = None,
        extraction_method: str | None = None,
        risk: RiskSummary | None = None,
    ) -> "GraduationRecord":
        """Stamp a new record. Missing metadata degrades to placeholder values."""
        meta = metadata or TokenMetadata()
        ts = detected_at if detected_at is not None else time.time()
        return cls(
            mint=mint,
            symbol=meta.symbol or UNKNOWN_SYMBOL,
            name=meta.name or UNKNOWN_NAME,
            liquidity_usd=meta.liquidity_usd,
            price_usd=meta.price_usd,
            market_cap_usd=meta.market_cap_usd,
            price_change_m5=meta.price_change_m5,
            price_change_h1=meta.price_change_h1,
            logo=meta.logo,
            website=meta.website,
            twitter=meta.twitter,
            telegram=meta.telegram,
            graduated_at=datetime.fromtimestamp(ts, tz=timezone.utc).isoformat(),
            detected_at_ms=int(ts * 1000),
            signature=signature,
            source=source,
            metadata_source=meta.source,
            extraction_method=extraction_method,
            risk=risk,
        )

    @property
    def has_logo(self) -> bool:
        return bool(self.logo)

    @property
    def has_website(self) -> bool:
        return bool(self.website)

    @property
    def has_socials(self) -> bool:
        return bool(self.twitter or self.telegram)

    def age_minutes(self, now: float | None = None) -> int:
        now_ms = (now if now is not None else time.time()) * 1000
        return max(0, int((now_ms - self.detected_at_ms) // 60_000))

    def to_launch(self, now: float | None = None) -> dict[str, Any]:
        """Public camelCase shape served by /api/live-launches."""
        risk = self.risk
        return {
            "symbol": self.symbol,
            "name": self.name,
            "contract": self.mint,
            "ageMinutes": self.age_minutes(now),
            "liquidity": self.liquidity_usd,
            "price": self.price_usd,
            "dex": "pumpswap",
            "hasLogo": self.has_logo,
            "hasWebsite": self.has_website,
            "hasSocials": self.has_socials,
            "website": self.website,
            "twitter": self.twitter,
            "telegram": self.telegram,
            "logo": self.logo,
            "dexscreenerUrl": f"https://dexscreener.com/solana/{self.mint}",
            "jupiterUrl": f"https://jup.ag/?sell={WSOL_MINT}&buy={self.mint}",
            "raydiumUrl": f"https://raydium.io/swap/?inputCurrency=sol&outputCurrency={self.mint}",
            "priceChange": {"m5": self.price_change_m5, "h1": self.price_change_h1},
            "graduated": True,
            "marketCap": self.market_cap_usd,
            "graduatedAt": self.graduated_at,
            "detectedAt": self.detected_at_ms,
            "signature": self.signature,
            "source": self.source,
            "rugCheckScore": risk.score if risk else 0,
            "rugCheckRisks": risk.risks if risk else [],
            "isRugged": risk.rugged if risk else False,
            "topHolders": risk.top_holders_pct if risk else None,
            "creatorHoldings": risk.creator_pct if risk else None,
        }


class ConnectionStatus(BaseModel):
    """Snapshot served to the status endpoint."""

    connected: bool
    state: str
    reconnect_attempts: int
    degraded: bool
    message_count: int
    cache_size: int
    oldest_timestamp: int | None = None
    newest_timestamp: int | None = None
