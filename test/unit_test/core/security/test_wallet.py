from datetime import datetime, timezone

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from agent_sns.core.security import (
    InvalidSignature,
    InvalidSiweMessage,
    InvalidWalletAddress,
    normalize_wallet_address,
    parse_siwe_message,
    recover_signer,
)


def personal_sign(account, text: str) -> str:
    signature = account.sign_message(encode_defunct(text=text)).signature.hex()
    return signature if signature.startswith("0x") else f"0x{signature}"


def siwe_text(address: str, nonce: str = "abcdef0123456789") -> str:
    issued = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.000Z")
    return (
        f"localhost wants you to sign in with your Ethereum account:\n{address}\n\n"
        f"Sign in to Agent SNS\n\nURI: http://localhost\nVersion: 1\nChain ID: 1\n"
        f"Nonce: {nonce}\nIssued At: {issued}"
    )


class TestNormalizeWalletAddress:
    def test_checksummed_address_is_lowercased(self):
        account = Account.create()
        assert normalize_wallet_address(account.address) == account.address.lower()

    def test_lowercase_address(self):
        address = Account.create().address.lower()
        assert normalize_wallet_address(f"  {address}  ") == address

    @pytest.mark.parametrize("value", ["", "0x123", "not-an-address", None])
    def test_invalid(self, value):
        with pytest.raises(InvalidWalletAddress):
            normalize_wallet_address(value)


class TestRecoverSigner:
    def test_recovers_lowercased_signer(self):
        account = Account.create()
        assert recover_signer("hello", personal_sign(account, "hello")) == account.address.lower()

    def test_other_message_recovers_other_address(self):
        account = Account.create()
        assert recover_signer("bye", personal_sign(account, "hello")) != account.address.lower()

    def test_malformed_signature(self):
        with pytest.raises(InvalidSignature):
            recover_signer("hello", "0x1234")


class TestSiwe:
    def test_parse_and_verify(self):
        account = Account.create()
        text = siwe_text(account.address)

        login = parse_siwe_message(text)
        assert login.address == account.address.lower()
        assert login.nonce == "abcdef0123456789"

        login.verify(personal_sign(account, text), domain="localhost")

    def test_wrong_signer(self):
        account = Account.create()
        text = siwe_text(account.address)
        login = parse_siwe_message(text)

        with pytest.raises(InvalidSignature):
            login.verify(personal_sign(Account.create(), text), domain="localhost")

    def test_wrong_domain(self):
        account = Account.create()
        text = siwe_text(account.address)

        with pytest.raises(InvalidSignature):
            parse_siwe_message(text).verify(personal_sign(account, text), domain="example.com")

    def test_unparseable(self):
        with pytest.raises(InvalidSiweMessage):
            parse_siwe_message("just some text")
