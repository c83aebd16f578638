"""Chain alias directory: numeric chain ids and upstream RPC lookup."""

from __future__ import annotations

import os
from enum import IntEnum
from typing import Mapping

from forknet.errors import MissingRpcError, UnknownChainError


class ChainId(IntEnum):
    ETHEREUM = 1
    SEPOLIA = 11155111
    GOERLI = 5
    OPTIMISM = 10
    OPTIMISM_TESTNET = 420
    POLYGON = 137
    POLYGON_TESTNET = 80001
    ARBITRUM = 42161
    ARBITRUM_TESTNET = 421613
    BASE = 8453
    ZORA = 7777777
    ZORA_GOERLI = 999
    BASE_TESTNET = 84531
    MOONBEAM = 1284
    MOONBEAM_TESTNET = 1287
    AVALANCHE = 43114
    AVALANCHE_TESTNET = 43113
    FANTOM = 250
    FANTOM_TESTNET = 4002
    SOLANA_DEVNET = 69420
    SOLANA_MAINNET = 1399811149


CHAIN_IDS: dict[str, ChainId] = {
    "ethereum": ChainId.ETHEREUM,
    "sepolia": ChainId.SEPOLIA,
    "goerli": ChainId.GOERLI,
    "optimism": ChainId.OPTIMISM,
    "optimismTestnet": ChainId.OPTIMISM_TESTNET,
    "polygon": ChainId.POLYGON,
    "polygonTestnet": ChainId.POLYGON_TESTNET,
    "arbitrum": ChainId.ARBITRUM,
    "arbitrumTestnet": ChainId.ARBITRUM_TESTNET,
    "base": ChainId.BASE,
    "zora": ChainId.ZORA,
    "zoraGoerli": ChainId.ZORA_GOERLI,
    "baseTestnet": ChainId.BASE_TESTNET,
    "moonbeam": ChainId.MOONBEAM,
    "moonbeamTestnet": ChainId.MOONBEAM_TESTNET,
    "avalanche": ChainId.AVALANCHE,
    "avalancheTestnet": ChainId.AVALANCHE_TESTNET,
    "fantom": ChainId.FANTOM,
    "fantomTestnet": ChainId.FANTOM_TESTNET,
    "solanaDevnet": ChainId.SOLANA_DEVNET,
    "solana": ChainId.SOLANA_MAINNET,
}


def known_aliases() -> list[str]:
    return list(CHAIN_IDS)


def chain_id_of(alias: str) -> int:
    """Return the numeric chain id for an alias."""
    chain_id = CHAIN_IDS.get(alias)
    if chain_id is None:
        raise UnknownChainError(alias)
    return int(chain_id)


def rpc_env_var(alias: str) -> str:
    return f"{alias.upper()}_RPC"


def rpc_of(alias: str, environ: Mapping[str, str] | None = None) -> str:
    """Return the upstream RPC URL for an alias from `<ALIAS>_RPC`."""
    env = os.environ if environ is None else environ
    env_var = rpc_env_var(alias)
    rpc = str(env.get(env_var, "")).strip()
    if not rpc:
        raise MissingRpcError(alias, env_var)
    return rpc
