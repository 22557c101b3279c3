"""
Confidential M&A deal room client.
Provides the value codec, the key/value record store, the signature-gated reveal flow,
and the deal lifecycle controller.
"""

__all__ = [
    "accounts",
    "challenge",
    "codec",
    "config",
    "crypto",
    "deals",
    "errors",
    "keymanager",
    "ledger",
    "models",
    "reveal",
    "status",
    "store",
]
