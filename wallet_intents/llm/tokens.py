"""Token alias normalization - loose currency names to canonical tickers"""

import re
from types import MappingProxyType
from typing import Mapping

# Keys are already in normalized form: uppercase, single spaces, no "$"
TOKEN_ALIASES: Mapping[str, str] = MappingProxyType({
    # Dollar-denominated requests always settle in USDC
    "USD": "USDC",
    "US DOLLAR": "USDC",
    "US DOLLARS": "USDC",
    "DOLLAR": "USDC",
    "DOLLARS": "USDC",
    "USD COIN": "USDC",
    "TETHER": "USDT",
    # Majors by full name
    "ETHEREUM": "ETH",
    "ETHER": "ETH",
    "ETHERS": "ETH",
    "BITCOIN": "BTC",
    "BITCOINS": "BTC",
    "XBT": "BTC",
    "SOLANA": "SOL",
    "SUI NETWORK": "SUI",
})

_WHITESPACE = re.compile(r"\s+")


def _clean(raw: str) -> str:
    text = _WHITESPACE.sub(" ", raw.strip())
    if text.startswith("$"):
        text = text[1:].lstrip()
    return text.upper()


def normalize_token(raw: str) -> str:
    """
    Canonicalize a currency name.

    Matching is case-insensitive and whitespace-trimmed. Anything outside the
    alias table is treated as an already-canonical ticker and returned
    uppercased, so arbitrary ERC-20 symbols pass through.

    >>> normalize_token(" usd ")
    'USDC'
    >>> normalize_token("pepe")
    'PEPE'
    """
    cleaned = _clean(raw)
    return TOKEN_ALIASES.get(cleaned, cleaned)
