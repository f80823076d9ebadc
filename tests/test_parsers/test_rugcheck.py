"""Tests for Rugcheck.xyz report client."""

from unittest.mock import AsyncMock, patch

import pytest

from src.parsers.rugcheck.client import RugcheckClient, _parse_report


def test_parse_report_prefers_normalised_score():
    data = {
        "score": 4501,
        "score_normalised": 45,
        "risks": [
            {"name": "Freeze Authority still enabled", "level": "danger", "score": 20},
            {"name": "Low Liquidity", "level": "warn", "score": 10},
        ],
        "rugged": False,
    }
    report = _parse_report(data, "Mint111")
    assert report.score == 45
    assert report.mint == "Mint111"
    assert report.risk_names == ["Freeze Authority still enabled", "Low Liquidity"]
    assert report.rugged is False


def test_parse_report_minimal():
    report = _parse_report({"score": 12, "risks": None}, "Mint111")
    assert report.score == 12
    assert report.risks == []


@pytest.mark.asyncio
async def test_client_returns_report():
    """Client correctly fetches and parses a report."""
    mock_response_data = {
        "score_normalised": 15,
        "risks": [{"name": "Low amount of LP Providers", "level": "info", "score": 5}],
        "rugged": True,
    }
    client = RugcheckClient(max_rps=100)
    mock_resp = AsyncMock()
    mock_resp.status_code = 200
    mock_resp.json = lambda: mock_response_data
    with patch.object(client, "_client") as mock_http:
        mock_http.get = AsyncMock(return_value=mock_resp)
        report = await client.get_token_report("TestMint123")

    assert report is not None
    assert report.score == 15
    assert report.rugged is True
    await client.close()


@pytest.mark.asyncio
async def test_client_404_returns_none():
    client = RugcheckClient(max_rps=100)
    mock_resp = AsyncMock()
    mock_resp.status_code = 404
    with patch.object(client, "_client") as mock_http:
        mock_http.get = AsyncMock(return_value=mock_resp)
        assert await client.get_token_report("TestMint123") is None
    await client.close()


def test_danger_count_and_description():
    report = _parse_report({
        "score_normalised": 80,
        "risks": [
            {"name": "Mint Authority still enabled", "level": "danger", "description": "More tokens can be minted"},
            {"name": "Low Liquidity", "level": "warn"},
            "garbage",
        ],
    }, "Mint111")
    assert report.danger_count == 1
    assert report.risks[0].description == "More tokens can be minted"
    assert report.risks[1].description == ""
    assert len(report.risks) == 2


def test_holder_concentration_from_full_report():
    holders = [{"address": f"H{i}", "owner": f"O{i}", "pct": 5.5} for i in range(12)]
    report = _parse_report({
        "score_normalised": 30,
        "topHolders": holders,
        "creator": "Creator111",
        "creatorBalance": 25_000_000,
        "token": {"supply": 1_000_000_000, "decimals": 6},
    }, "Mint111")
    assert report.top_holders_pct == 55.0
    assert report.creator_pct == 2.5


def test_holder_concentration_absent():
    report = _parse_report({
        "score": 1,
        "topHolders": [],
        "creatorBalance": 10,
        "token": {"supply": 0},
    }, "Mint111")
    assert report.top_holders_pct is None
    assert report.creator_pct is None


@pytest.mark.asyncio
async def test_client_requests_full_report():
    client = RugcheckClient(max_rps=100)
    mock_resp = AsyncMock()
    mock_resp.status_code = 200
    mock_resp.json = lambda: {"score_normalised": 1}
    with patch.object(client, "_client") as mock_http:
        mock_http.get = AsyncMock(return_value=mock_resp)
        await client.get_token_report("TestMint123")
        url = mock_http.get.call_args[0][0]

    assert url.endswith("/tokens/TestMint123/report")
    await client.close()
