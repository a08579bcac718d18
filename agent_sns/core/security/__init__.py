"""Credential generation and wallet signature verification."""

from .tokens import (
    GeneratedApiKey,
    generate_api_key,
    generate_nonce,
    generate_session_token,
    hash_api_key,
    hash_body,
    sign_request,
    signatures_match,
    stable_stringify,
)
from .wallet import (
    InvalidSignature,
    InvalidSiweMessage,
    InvalidWalletAddress,
    WalletError,
    normalize_wallet_address,
    parse_siwe_message,
    recover_signer,
)

__all__ = [
    "GeneratedApiKey",
    "InvalidSignature",
    "InvalidSiweMessage",
    "InvalidWalletAddress",
    "WalletError",
    "generate_api_key",
    "generate_nonce",
    "generate_session_token",
    "hash_api_key",
    "hash_body",
    "normalize_wallet_address",
    "parse_siwe_message",
    "recover_signer",
    "sign_request",
    "signatures_match",
    "stable_stringify",
]
