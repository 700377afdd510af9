"""
Tests for novi_sdk.signers module.
"""

import pytest
from solders.keypair import Keypair  # type: ignore
from solders.signature import Signature  # type: ignore

from novi_sdk.ledger import Signer
from novi_sdk.signers import MemorySigner


class TestMemorySigner:
    """Tests for MemorySigner class."""

    def test_warns_development_only(self, payer_keypair):
        """Test that constructing a MemorySigner warns."""
        with pytest.warns(UserWarning, match="development only"):
            MemorySigner(payer_keypair)

    @pytest.mark.filterwarnings("ignore::UserWarning")
    def test_accepts_secret_forms(self, payer_keypair, payer_address):
        """Test construction from a keypair, raw bytes and base58 text."""
        for secret in (payer_keypair, bytes(payer_keypair), str(payer_keypair)):
            assert MemorySigner(secret).address == payer_address

    async def test_get_address(self, signer, payer_address):
        """Test that the address matches the keypair."""
        assert await signer.get_address() == payer_address

    async def test_sign_verifies(self, signer, payer_keypair):
        """Test that signatures verify against the public key."""
        payload = b"settlement message"

        raw = await signer.sign(payload)

        assert len(raw) == 64
        assert Signature.from_bytes(raw).verify(payer_keypair.pubkey(), payload)

    def test_satisfies_signer_protocol(self, signer):
        """Test structural conformance to Signer."""
        assert isinstance(signer, Signer)

    @pytest.mark.filterwarnings("ignore::UserWarning")
    def test_different_keys_differ(self):
        """Test that distinct keypairs give distinct addresses."""
        a = MemorySigner(Keypair.from_seed(bytes([7] * 32)))
        b = MemorySigner(Keypair.from_seed(bytes([8] * 32)))

        assert a.address != b.address
