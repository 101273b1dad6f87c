"""Stellar chain adapters.

Implements the ChainClient protocol against Horizon (transaction reads)
and Soroban RPC (subscription contract charges).
"""

from stellarbill.adapters.chain.fake import FakeChainClient, FakeChainClientRegistry
from stellarbill.adapters.chain.stellar import StellarChainClient, StellarChainClientRegistry

__all__ = [
    "FakeChainClient",
    "FakeChainClientRegistry",
    "StellarChainClient",
    "StellarChainClientRegistry",
]
