"""
Environment variable loading for soltrace.

- SOLANA_RPC_URL: explicit RPC endpoint (wins over everything else)
- SOLANA_NETWORK: mainnet | devnet (default: mainnet)
- HELIUS_API_KEY: Helius key, used for the network-specific URL when no
  explicit SOLANA_RPC_URL is set
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is soltrace/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEVNET_RPC_URL = "https://api.devnet.solana.com"
MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
HELIUS_MAINNET_URL_TEMPLATE = "https://mainnet.helius-rpc.com/?api-key={key}"
HELIUS_DEVNET_URL_TEMPLATE = "https://devnet.helius-rpc.com/?api-key={key}"


def load_soltrace_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides set vars."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def get_solana_network() -> str:
    """Return SOLANA_NETWORK from env: mainnet | devnet. Default: mainnet."""
    load_soltrace_env()
    raw = (os.getenv("SOLANA_NETWORK") or os.getenv("SOLANA_CLUSTER") or "mainnet").strip().lower()
    if raw == "devnet":
        return "devnet"
    return "mainnet"


def get_solana_rpc_url() -> str:
    """
    Resolve Solana RPC URL from env.
    Order: SOLANA_RPC_URL > HELIUS_API_KEY (network-specific) > public endpoint.
    """
    load_soltrace_env()
    url = (os.getenv("SOLANA_RPC_URL") or "").strip()
    if url:
        return url
    network = get_solana_network()
    key = (os.getenv("HELIUS_API_KEY") or "").strip()
    if key:
        if network == "devnet":
            return HELIUS_DEVNET_URL_TEMPLATE.format(key=key)
        return HELIUS_MAINNET_URL_TEMPLATE.format(key=key)
    return DEVNET_RPC_URL if network == "devnet" else MAINNET_RPC_URL


def mask_rpc_url(url: str) -> str:
    """Hide the API key in an RPC URL for logging."""
    if "api-key=" in url:
        return url.split("api-key=")[0] + "api-key=***"
    return url
