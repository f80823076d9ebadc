"""Resolve the graduated mint for a migration signature.

Cheapest evidence first: the notification's own log lines, then the parsed
transaction (rate limited), scanned by an ordered list of strategies.
The first strategy that returns a mint wins.
"""

import asyncio
import json
from dataclasses import dataclass

from loguru import logger

from src.parsers.graduation.constants import (
    AMM_CREATE_POOL_BASE_MINT_INDEX,
    MINT_PATTERN,
    MINT_SUFFIX,
    PUMPSWAP_AMM_PROGRAM_ID,
    WSOL_MINT,
)
from src.parsers.graduation.rpc_client import SolanaRpcClient


@dataclass
class MintExtraction:
    mint: str
    method: str


def _is_suffixed_mint(value: object) -> bool:
    return isinstance(value, str) and MINT_PATTERN.fullmatch(value) is not None


def find_mint_in_logs(logs: list[str]) -> str | None:
    """First suffix-shaped address mentioned in the log lines."""
    for line in logs:
        match = MINT_PATTERN.search(line)
        if match:
            return match.group(0)
    return None


def _pubkey(entry: object) -> str | None:
    if isinstance(entry, dict):
        key = entry.get("pubkey")
        return key if isinstance(key, str) else None
    return entry if isinstance(entry, str) else None


def _message(tx: dict) -> dict:
    return (tx.get("transaction") or {}).get("message") or {}


def _meta(tx: dict) -> dict:
    return tx.get("meta") or {}


class MintStrategy:
    """One step of the fallback chain over a jsonParsed transaction."""

    name = "base"

    def attempt(self, tx: dict) -> str | None:
        raise NotImplementedError


class AccountKeysStrategy(MintStrategy):
    name = "account_keys"

    def attempt(self, tx: dict) -> str | None:
        for entry in _message(tx).get("accountKeys", []):
            key = _pubkey(entry)
            if _is_suffixed_mint(key):
                return key
        return None


class TokenBalancesStrategy(MintStrategy):
    """Mint field of token balance entries.

    A suffixed mint wins. Otherwise only an unambiguous non-WSOL mint is
    accepted, since migrations also touch the freshly created LP mint.
    """

    def __init__(self, field: str) -> None:
        self._field = field
        self.name = "post_balances" if field == "postTokenBalances" else "pre_balances"

    def attempt(self, tx: dict) -> str | None:
        mints: list[str] = []
        for balance in _meta(tx).get(self._field) or []:
            mint = balance.get("mint") if isinstance(balance, dict) else None
            if not isinstance(mint, str) or mint == WSOL_MINT or mint in mints:
                continue
            if _is_suffixed_mint(mint):
                return mint
            mints.append(mint)
        return mints[0] if len(mints) == 1 else None


class InnerInstructionsStrategy(MintStrategy):
    name = "inner_instructions"

    def attempt(self, tx: dict) -> str | None:
        for group in _meta(tx).get("innerInstructions") or []:
            for ix in group.get("instructions", []):
                parsed = ix.get("parsed")
                if not isinstance(parsed, dict):
                    continue
                info = parsed.get("info")
                if not isinstance(info, dict):
                    continue
                if _is_suffixed_mint(info.get("mint")):
                    return info["mint"]
                for value in info.values():
                    if _is_suffixed_mint(value):
                        return value
        return None


class AmmInstructionStrategy(MintStrategy):
    """Best-effort only: any unparsed instruction addressed to the AMM program
    is assumed to be create_pool, and its base-mint account slot is taken.

    No discriminator check, so a swap or deposit routed through the same
    program will yield a wrong account. Runs after every precise strategy.
    """

    name = "amm_instruction_heuristic"

    def __init__(self, program_id: str = PUMPSWAP_AMM_PROGRAM_ID) -> None:
        self._program_id = program_id

    def attempt(self, tx: dict) -> str | None:
        for ix in self._instructions(tx):
            if ix.get("programId") != self._program_id or "parsed" in ix:
                continue
            accounts = ix.get("accounts") or []
            if len(accounts) <= AMM_CREATE_POOL_BASE_MINT_INDEX:
                continue
            candidate = _pubkey(accounts[AMM_CREATE_POOL_BASE_MINT_INDEX])
            if candidate and candidate != WSOL_MINT:
                return candidate
        return None

    @staticmethod
    def _instructions(tx: dict) -> list[dict]:
        instructions = list(_message(tx).get("instructions") or [])
        for group in _meta(tx).get("innerInstructions") or []:
            instructions.extend(group.get("instructions", []))
        return [ix for ix in instructions if isinstance(ix, dict)]


class RawTextStrategy(MintStrategy):
    """Last resort: pattern scan over the whole serialized record."""

    name = "raw_text"

    def attempt(self, tx: dict) -> str | None:
        matches = MINT_PATTERN.findall(json.dumps(tx))
        unique = list(dict.fromkeys(matches))
        if len(unique) > 1:
            logger.debug(f"[GRAD] Raw scan found {len(unique)} {MINT_SUFFIX} mints, taking first")
        return unique[0] if unique else None


def default_strategies(amm_program_id: str = PUMPSWAP_AMM_PROGRAM_ID) -> list[MintStrategy]:
    return [
        AccountKeysStrategy(),
        TokenBalancesStrategy("postTokenBalances"),
        TokenBalancesStrategy("preTokenBalances"),
        InnerInstructionsStrategy(),
        AmmInstructionStrategy(amm_program_id),
        RawTextStrategy(),
    ]


class MintExtractor:
    """Logs first, then up to ``attempts`` rate-limited transaction fetches."""

    def __init__(
        self,
        rpc: SolanaRpcClient,
        *,
        strategies: list[MintStrategy] | None = None,
        attempts: int = 2,
        retry_delay_sec: float = 10.0,
    ) -> None:
        self._rpc = rpc
        self._strategies = strategies if strategies is not None else default_strategies()
        self._attempts = attempts
        self._retry_delay = retry_delay_sec

    async def extract(self, signature: str, logs: list[str]) -> MintExtraction | None:
        mint = find_mint_in_logs(logs)
        if mint:
            return MintExtraction(mint=mint, method="logs")

        for attempt in range(1, self._attempts + 1):
            tx = await self._rpc.get_transaction(signature)
            if tx is not None:
                return self.scan_transaction(signature, tx)
            if attempt < self._attempts:
                logger.debug(
                    f"[GRAD] Tx {signature[:16]} not indexed yet, retry in {self._retry_delay:.0f}s"
                )
                await asyncio.sleep(self._retry_delay)

        logger.info(f"[GRAD] No tx for {signature[:16]} after {self._attempts} attempts, dropped")
        return None

    def scan_transaction(self, signature: str, tx: dict) -> MintExtraction | None:
        for strategy in self._strategies:
            try:
                mint = strategy.attempt(tx)
            except (AttributeError, TypeError, KeyError) as e:
                logger.debug(f"[GRAD] {strategy.name} failed on {signature[:16]}: {e}")
                continue
            if mint:
                return MintExtraction(mint=mint, method=strategy.name)
        logger.info(f"[GRAD] No mint found in tx {signature[:16]}, dropped")
        return None
