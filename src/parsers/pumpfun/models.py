"""Data models for Pump.fun frontend API responses."""

from dataclasses import dataclass


@dataclass
class PumpfunCoin:
    """A coin as returned by /coins/{mint}."""

    mint: str = ""
    name: str = ""
    symbol: str = ""
    image_uri: str | None = None
    website: str | None = None
    twitter: str | None = None
    telegram: str | None = None
    usd_market_cap: float = 0.0
