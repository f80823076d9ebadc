"""Tests for Pump.fun coin metadata client."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.parsers.pumpfun.client import PumpfunClient, _parse_coin

MINT = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJospump"


class TestParseCoin:
    def test_full(self) -> None:
        coin = _parse_coin({
            "mint": MINT, "name": "Frog", "symbol": "FROG",
            "image_uri": "https://ipfs/frog", "twitter": "https://x.com/frog",
            "telegram": "", "website": None, "usd_market_cap": "69000.5",
            "complete": True, "pump_swap_pool": "PoolAddr",
        })
        assert coin.symbol == "FROG"
        assert coin.telegram is None
        assert coin.website is None
        assert coin.usd_market_cap == 69000.5


class TestPumpfunClient:
    @pytest.mark.asyncio
    async def test_get_coin(self) -> None:
        client = PumpfunClient(max_rps=100.0)
        mock_resp = MagicMock()
        mock_resp.status_code = 200
        mock_resp.json.return_value = {"mint": MINT, "name": "Frog", "symbol": "FROG"}
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=mock_resp)

        coin = await client.get_coin(MINT)

        assert coin is not None
        assert coin.name == "Frog"
        assert client._client.get.call_args.args[0].endswith(f"/coins/{MINT}")

    @pytest.mark.asyncio
    async def test_not_found(self) -> None:
        client = PumpfunClient(max_rps=100.0)
        mock_resp = MagicMock()
        mock_resp.status_code = 404
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=mock_resp)

        assert await client.get_coin(MINT) is None

    @pytest.mark.asyncio
    async def test_empty_body(self) -> None:
        client = PumpfunClient(max_rps=100.0)
        mock_resp = MagicMock()
        mock_resp.status_code = 200
        mock_resp.json.return_value = None
        client._client = AsyncMock()
        client._client.get = AsyncMock(return_value=mock_resp)

        assert await client.get_coin(MINT) is None

    @pytest.mark.asyncio
    async def test_timeout_exhausts(self, monkeypatch) -> None:
        monkeypatch.setattr("src.parsers.pumpfun.client.RETRY_DELAYS", [0.0, 0.0])
        client = PumpfunClient(max_rps=100.0)
        client._client = AsyncMock()
        client._client.get = AsyncMock(side_effect=httpx.ReadTimeout("slow"))

        assert await client.get_coin(MINT) is None
        assert client._client.get.await_count == 3
