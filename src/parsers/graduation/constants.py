"""Pump.fun graduation constants (bonding curve → PumpSwap AMM migration)."""

import re

PUMP_PROGRAM_ID = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"
PUMPSWAP_AMM_PROGRAM_ID = "pAMMBay6oceH9fJKBRHGP5D4bD4sWpmSwMn52FMfXEA"

# Exact log line emitted by the bonding curve program's migrate instruction.
# The only positive signal accepted by the filter.
MIGRATION_MARKER = "Instruction: Migrate"

# Pump.fun vanity suffix on every mint it creates
MINT_SUFFIX = "pump"

# Base58 address of 32-44 chars ending in the suffix
MINT_PATTERN = re.compile(
    rf"(?<![1-9A-HJ-NP-Za-km-z])[1-9A-HJ-NP-Za-km-z]{{28,40}}{MINT_SUFFIX}(?![1-9A-HJ-NP-Za-km-z])"
)

# PumpSwap create_pool accounts: [0]=pool, [1]=global_config, [2]=creator, [3]=base_mint
AMM_CREATE_POOL_BASE_MINT_INDEX = 3

SUBSCRIBE_REQUEST_ID = 1
SOURCE_TAG = "pumpswap_migration"

WSOL_MINT = "So11111111111111111111111111111111111111112"
