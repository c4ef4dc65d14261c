"""Linea contract addresses and external endpoints."""

from typing import TypedDict


class LineaTokens(TypedDict):
    REX: str
    ETH: str
    USDC: str
    USDT: str
    WBTC: str


TOKENS: LineaTokens = {
    "REX": "0xEfD81eeC32B9A8222D1842ec3d99c7532C31e348",
    "ETH": "0xe5D7C2a44FfDDf6b295A15c148167daaAf5Cf34f",  # WETH
    "USDC": "0x176211869cA2b568f2A7D4EE941E073a821EE1ff",
    "USDT": "0xA219439258ca9da29E9Cc4cE5596924745e12B93",
    "WBTC": "0x3aAB2285ddcDdaD8edf438C1bAB47e1a9D05a9b4",
}

# Aave's ETH/USD Chainlink aggregator on Linea
ETH_USD_PRICE_FEED = "0x3c6Cd9Cc7c7a4c2Cf5a82734CD249D7D593354dA"

MULTICALL3_ADDRESS = "0xcA11bde05977b3631167028862bE2a173976CA11"

DEFAULT_LINEA_RPC_URL = "https://rpc.linea.build"

REWARDS_FEED_URL = (
    "https://gist.githubusercontent.com/0xFillin/3ba4b98bde295e846bf4617f4d66d399"
    "/raw/a1bef60ba6bfe8e3a3b78ac6d25ca268d56b8dcd/linea-week-1"
)

COINGECKO_SIMPLE_PRICE_URL = "https://api.coingecko.com/api/v3/simple/price"
COINGECKO_LINEA_ID = "linea"

LINEA_TOTAL_SUPPLY = 72_009_990_000

# Reward feed amounts are per week
REWARD_PERIODS_PER_YEAR = 52

CACHE_FRESH_SECONDS = 10 * 60
CACHE_MAX_AGE_SECONDS = 60 * 60
REFRESH_INTERVAL_SECONDS = 10 * 60

LINEASCAN_ADDRESS_URL = "https://lineascan.build/address/{address}"
AAVE_RESERVE_URL = (
    "https://app.aave.com/reserve-overview/"
    "?underlyingAsset={underlying}&marketName=proto_linea_v3"
)
ETHEREX_LIQUIDITY_URL = "https://www.etherex.finance/liquidity/{address}"
EULER_VAULT_URL = "https://app.euler.finance/vault/{address}?network=lineamainnet"
