"""
Wallet signature helpers.

Two signing schemes are accepted:

- EIP-191 ``personal_sign`` over a plain text message (wallet challenges and
  agent registration), verified with ``eth-account``.
- EIP-4361 Sign-In with Ethereum messages (nonce login), parsed and
  verified with ``siwe``.

Addresses leave this module lower-cased.
"""

from __future__ import annotations

from dataclasses import dataclass

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import is_address
from siwe import SiweMessage, VerificationError


class WalletError(Exception):
    """Base class for wallet verification failures."""


class InvalidWalletAddress(WalletError):
    """The value is not a valid (or correctly checksummed) address."""


class InvalidSignature(WalletError):
    """The signature is malformed or does not match the expected signer."""


class InvalidSiweMessage(WalletError):
    """The text is not a parseable EIP-4361 message."""


def normalize_wallet_address(value: str) -> str:
    """Validate an address and return it lower-cased.

    Mixed-case input must carry a valid EIP-55 checksum.

    Raises:
        InvalidWalletAddress: If the value is not an address
    """
    candidate = (value or "").strip()
    if not is_address(candidate):
        raise InvalidWalletAddress(f"Invalid wallet address: {value!r}")
    return candidate.lower()


def recover_signer(message: str, signature: str) -> str:
    """Recover the lower-cased address that ``personal_sign``-ed ``message``.

    Raises:
        InvalidSignature: If the signature cannot be decoded or recovered
    """
    try:
        address = Account.recover_message(encode_defunct(text=message), signature=signature)
    except Exception as e:
        raise InvalidSignature(str(e)) from e
    return address.lower()


@dataclass(frozen=True)
class SiweLogin:
    """Fields of a parsed Sign-In with Ethereum message needed for login."""

    address: str
    nonce: str
    message: SiweMessage

    def verify(self, signature: str, domain: str) -> None:
        """Check the signature, domain, nonce and validity window.

        Raises:
            InvalidSignature: If any check fails
        """
        try:
            self.message.verify(signature, domain=domain, nonce=self.nonce)
        except VerificationError as e:
            raise InvalidSignature(f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise InvalidSignature(str(e)) from e


def parse_siwe_message(text: str) -> SiweLogin:
    """Parse an EIP-4361 message.

    Raises:
        InvalidSiweMessage: If the text does not follow the EIP-4361 grammar
    """
    try:
        message = SiweMessage.from_message(message=text)
    except ValueError as e:
        raise InvalidSiweMessage(str(e)) from e
    return SiweLogin(address=message.address.lower(), nonce=message.nonce, message=message)
