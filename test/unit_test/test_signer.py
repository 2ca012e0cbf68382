"""
Test Signer Module

Tests for local signing of versioned transactions and finalize_transaction.
"""

import sys
import json
import base64
from pathlib import Path
from unittest.mock import Mock

import base58
import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0, to_bytes_versioned
from solders.signature import Signature
from solders.transaction import VersionedTransaction

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from jupiter_swap.infra.solana_signer import LocalSigner, create_signer
from jupiter_swap.modules.swap import finalize_transaction
from jupiter_swap.errors import SignerError, TransactionError


def _unsigned_tx_bytes(payer: Keypair) -> bytes:
    """Serialized transaction with an empty signature slot for payer"""
    message = MessageV0.try_compile(payer.pubkey(), [], [], Hash.default())
    tx = VersionedTransaction.populate(message, [Signature.default()])
    return bytes(tx)


class TestLocalSigner:
    """Test LocalSigner"""

    def test_pubkey(self):
        """Test pubkey is the keypair's base58 address"""
        keypair = Keypair()
        signer = LocalSigner(keypair)
        assert signer.pubkey == str(keypair.pubkey())

    def test_from_base58(self):
        """Test loading from a base58 secret key"""
        keypair = Keypair()
        signer = LocalSigner.from_base58(base58.b58encode(bytes(keypair)).decode())
        assert signer.pubkey == str(keypair.pubkey())

    def test_from_base58_empty(self):
        """Test empty key raises SignerError"""
        with pytest.raises(SignerError):
            LocalSigner.from_base58("")

    def test_from_base58_invalid(self):
        """Test invalid base58 raises SignerError"""
        with pytest.raises(SignerError):
            LocalSigner.from_base58("0OIl")

    def test_from_file_json(self, tmp_path):
        """Test loading a Solana CLI keypair file"""
        keypair = Keypair()
        path = tmp_path / "id.json"
        path.write_text(json.dumps(list(bytes(keypair))))

        signer = LocalSigner.from_file(str(path))
        assert signer.pubkey == str(keypair.pubkey())

    def test_sign_transaction(self):
        """Signature covers the versioned message and lands in the payer slot"""
        keypair = Keypair()
        signer = LocalSigner(keypair)

        signed_bytes, sig = signer.sign_transaction(_unsigned_tx_bytes(keypair))

        signed = VersionedTransaction.from_bytes(signed_bytes)
        assert str(signed.signatures[0]) == sig
        assert signed.signatures[0].verify(keypair.pubkey(), to_bytes_versioned(signed.message))

    def test_sign_transaction_not_a_signer(self):
        """Test signing fails when the wallet is not a required signer"""
        payer = Keypair()
        signer = LocalSigner(Keypair())

        with pytest.raises(SignerError) as exc_info:
            signer.sign_transaction(_unsigned_tx_bytes(payer))

        assert "not in the required signers" in str(exc_info.value)


def test_create_signer_prefers_keypair():
    """Test create_signer uses the keypair before the private key"""
    keypair = Keypair()
    other = Keypair()
    signer = create_signer(
        keypair=keypair,
        private_key=base58.b58encode(bytes(other)).decode(),
    )
    assert signer.pubkey == str(keypair.pubkey())


class TestFinalizeTransaction:
    """Test finalize_transaction"""

    def test_signs_and_sends(self):
        """Test the signed transaction is sent with preflight settings"""
        keypair = Keypair()
        rpc = Mock()
        rpc.send_transaction.return_value = "5txid"
        swap_tx = base64.b64encode(_unsigned_tx_bytes(keypair)).decode()

        txid = finalize_transaction(
            swap_tx,
            LocalSigner(keypair),
            rpc,
            skip_preflight=False,
            preflight_commitment="confirmed",
        )

        assert txid == "5txid"
        sent = rpc.send_transaction.call_args.args[0]
        signed = VersionedTransaction.from_bytes(sent)
        assert signed.signatures[0].verify(keypair.pubkey(), to_bytes_versioned(signed.message))
        assert rpc.send_transaction.call_args.kwargs == {
            "skip_preflight": False,
            "preflight_commitment": "confirmed",
        }

    def test_invalid_base64(self):
        """Test undecodable transactions fail before sending"""
        rpc = Mock()

        with pytest.raises(TransactionError) as exc_info:
            finalize_transaction("not base64!!", LocalSigner(Keypair()), rpc)

        assert exc_info.value.message.startswith("Error finalizing transaction:")
        rpc.send_transaction.assert_not_called()

    def test_send_failure(self):
        """Test send errors are reported as finalize failures"""
        keypair = Keypair()
        rpc = Mock()
        rpc.send_transaction.side_effect = RuntimeError("Blockhash not found")
        swap_tx = base64.b64encode(_unsigned_tx_bytes(keypair)).decode()

        with pytest.raises(TransactionError) as exc_info:
            finalize_transaction(swap_tx, LocalSigner(keypair), rpc)

        assert "Blockhash not found" in str(exc_info.value)
