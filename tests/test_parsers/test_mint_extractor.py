"""Tests for graduated-mint extraction and its fallback chain."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.parsers.graduation.constants import PUMPSWAP_AMM_PROGRAM_ID, WSOL_MINT
from src.parsers.graduation.mint_extractor import (
    AccountKeysStrategy,
    AmmInstructionStrategy,
    InnerInstructionsStrategy,
    MintExtractor,
    RawTextStrategy,
    TokenBalancesStrategy,
    find_mint_in_logs,
)
from src.parsers.graduation.rpc_client import SolanaRpcClient

MINT = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJospump"
MINT_B = "FaKeMint" + "1" * 31 + "pump"
LP_MINT = "4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R"


def _tx(**overrides) -> dict:
    tx = {
        "transaction": {"message": {"accountKeys": [], "instructions": []}},
        "meta": {
            "err": None,
            "preTokenBalances": [],
            "postTokenBalances": [],
            "innerInstructions": [],
        },
    }
    for key, value in overrides.items():
        if key in ("accountKeys", "instructions"):
            tx["transaction"]["message"][key] = value
        else:
            tx["meta"][key] = value
    return tx


class TestFindMintInLogs:
    def test_finds_suffixed_address(self) -> None:
        logs = ["Program log: Instruction: Migrate", f"Program log: mint={MINT}"]
        assert find_mint_in_logs(logs) == MINT

    def test_ignores_addresses_without_suffix(self) -> None:
        assert find_mint_in_logs([f"Program {PUMPSWAP_AMM_PROGRAM_ID} invoke [2]"]) is None

    def test_ignores_short_words(self) -> None:
        assert find_mint_in_logs(["Program log: pump it", "abcpump"]) is None

    def test_ignores_overlong_runs(self) -> None:
        assert find_mint_in_logs(["A" * 60 + "pump"]) is None


class TestStrategies:
    def test_account_keys_dict_and_str(self) -> None:
        tx = _tx(accountKeys=[{"pubkey": LP_MINT, "signer": True}, {"pubkey": MINT}])
        assert AccountKeysStrategy().attempt(tx) == MINT
        tx = _tx(accountKeys=[LP_MINT, MINT])
        assert AccountKeysStrategy().attempt(tx) == MINT

    def test_post_balances_prefers_suffixed(self) -> None:
        tx = _tx(postTokenBalances=[
            {"mint": WSOL_MINT}, {"mint": LP_MINT}, {"mint": MINT},
        ])
        assert TokenBalancesStrategy("postTokenBalances").attempt(tx) == MINT

    def test_balances_accept_single_unambiguous_mint(self) -> None:
        tx = _tx(preTokenBalances=[{"mint": WSOL_MINT}, {"mint": LP_MINT}, {"mint": LP_MINT}])
        assert TokenBalancesStrategy("preTokenBalances").attempt(tx) == LP_MINT

    def test_balances_reject_ambiguous(self) -> None:
        other = "9n4nbM75f5Ui33ZbPYXn59EwSgE8CGsHtAeTH5YFeJ9E"
        tx = _tx(postTokenBalances=[{"mint": LP_MINT}, {"mint": other}])
        assert TokenBalancesStrategy("postTokenBalances").attempt(tx) is None

    def test_inner_instructions_parsed_info(self) -> None:
        tx = _tx(innerInstructions=[{
            "index": 0,
            "instructions": [
                {"programId": "x", "accounts": []},
                {"parsed": {"type": "transfer", "info": {"source": LP_MINT}}},
                {"parsed": {"type": "transferChecked", "info": {"mint": MINT, "amount": "1"}}},
            ],
        }])
        assert InnerInstructionsStrategy().attempt(tx) == MINT

    def test_amm_heuristic_takes_base_mint_slot(self) -> None:
        base_mint = "9n4nbM75f5Ui33ZbPYXn59EwSgE8CGsHtAeTH5YFeJ9E"
        tx = _tx(instructions=[
            {"programId": PUMPSWAP_AMM_PROGRAM_ID, "parsed": {"type": "x"}},
            {
                "programId": PUMPSWAP_AMM_PROGRAM_ID,
                "accounts": ["pool", "config", "creator", base_mint, WSOL_MINT],
                "data": "abc",
            },
        ])
        assert AmmInstructionStrategy().attempt(tx) == base_mint

    def test_amm_heuristic_skips_other_programs(self) -> None:
        tx = _tx(instructions=[{"programId": "other", "accounts": ["a", "b", "c", "d"]}])
        assert AmmInstructionStrategy().attempt(tx) is None

    def test_raw_text_first_unique(self) -> None:
        tx = _tx(logMessages=[f"x {MINT_B}", f"y {MINT_B}", f"z {MINT}"])
        assert RawTextStrategy().attempt(tx) == MINT_B

    def test_raw_text_nothing(self) -> None:
        assert RawTextStrategy().attempt(_tx()) is None


class TestMintExtractor:
    @pytest.mark.asyncio
    async def test_logs_win_without_network(self) -> None:
        rpc = MagicMock()
        rpc.get_transaction = AsyncMock()
        extractor = MintExtractor(rpc)
        result = await extractor.extract("sig", [f"Program log: {MINT}"])
        assert result is not None
        assert result.mint == MINT
        assert result.method == "logs"
        rpc.get_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_chain_order_first_success_wins(self) -> None:
        rpc = MagicMock()
        rpc.get_transaction = AsyncMock(return_value=_tx(
            postTokenBalances=[{"mint": MINT}],
            logMessages=[MINT_B],
        ))
        extractor = MintExtractor(rpc)
        result = await extractor.extract("sig", ["Program log: Instruction: Migrate"])
        assert result.mint == MINT
        assert result.method == "post_balances"

    @pytest.mark.asyncio
    async def test_retries_once_then_gives_up(self) -> None:
        rpc = MagicMock()
        rpc.get_transaction = AsyncMock(return_value=None)
        extractor = MintExtractor(rpc, attempts=2, retry_delay_sec=10.0)
        with patch("src.parsers.graduation.mint_extractor.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await extractor.extract("sig", [])
        assert result is None
        assert rpc.get_transaction.await_count == 2
        sleep.assert_awaited_once_with(10.0)

    @pytest.mark.asyncio
    async def test_second_attempt_succeeds(self) -> None:
        rpc = MagicMock()
        rpc.get_transaction = AsyncMock(side_effect=[None, _tx(accountKeys=[MINT])])
        extractor = MintExtractor(rpc, retry_delay_sec=0)
        result = await extractor.extract("sig", [])
        assert result.mint == MINT
        assert result.method == "account_keys"

    @pytest.mark.asyncio
    async def test_tx_without_mint_is_dropped_without_retry(self) -> None:
        rpc = MagicMock()
        rpc.get_transaction = AsyncMock(return_value=_tx())
        extractor = MintExtractor(rpc, retry_delay_sec=0)
        assert await extractor.extract("sig", []) is None
        assert rpc.get_transaction.await_count == 1

    def test_broken_strategy_is_skipped(self) -> None:
        class Broken(AccountKeysStrategy):
            def attempt(self, tx: dict) -> str | None:
                raise TypeError("bad shape")

        extractor = MintExtractor(MagicMock(), strategies=[Broken(), RawTextStrategy()])
        result = extractor.scan_transaction("sig", _tx(logMessages=[MINT]))
        assert result.method == "raw_text"


class TestSolanaRpcClient:
    @pytest.mark.asyncio
    async def test_returns_result(self) -> None:
        client = SolanaRpcClient("http://rpc", min_interval=0.0)
        mock_resp = MagicMock()
        mock_resp.json.return_value = {"jsonrpc": "2.0", "result": {"slot": 1}}
        client._client = AsyncMock()
        client._client.post = AsyncMock(return_value=mock_resp)

        assert await client.get_transaction("sig") == {"slot": 1}
        payload = client._client.post.call_args.kwargs["json"]
        assert payload["method"] == "getTransaction"
        assert payload["params"][1]["encoding"] == "jsonParsed"

    @pytest.mark.asyncio
    async def test_not_indexed_returns_none(self) -> None:
        client = SolanaRpcClient("http://rpc", min_interval=0.0)
        mock_resp = MagicMock()
        mock_resp.json.return_value = {"jsonrpc": "2.0", "result": None}
        client._client = AsyncMock()
        client._client.post = AsyncMock(return_value=mock_resp)
        assert await client.get_transaction("sig") is None

    @pytest.mark.asyncio
    async def test_http_error_returns_none(self) -> None:
        import httpx

        client = SolanaRpcClient("http://rpc", min_interval=0.0)
        client._client = AsyncMock()
        client._client.post = AsyncMock(side_effect=httpx.ConnectError("down"))
        assert await client.get_transaction("sig") is None
