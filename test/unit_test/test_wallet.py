"""
Test Wallet Module

Tests for token balance lookups with a mocked RPC client.
"""

import sys
from decimal import Decimal
from pathlib import Path
from unittest.mock import Mock

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from jupiter_swap.modules.wallet import WalletModule
from jupiter_swap.types import TokenBalance
from jupiter_swap.types.solana_tokens import TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID

OWNER = "Owner111"
USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
TOKEN22 = "Token22Mint1111111111111111111111111111111"


def _token_account(mint, amount, decimals):
    return {
        "pubkey": f"Acct{mint[:4]}{amount}",
        "account": {
            "data": {
                "parsed": {
                    "info": {
                        "mint": mint,
                        "owner": OWNER,
                        "tokenAmount": {
                            "amount": str(amount),
                            "decimals": decimals,
                            "uiAmountString": str(Decimal(amount) / Decimal(10 ** decimals)),
                        },
                    },
                    "type": "account",
                },
                "program": "spl-token",
            },
        },
    }


class TestGetBalanceOfToken:
    """Test single-token balance"""

    def test_sums_accounts(self):
        """Test balance sums all accounts for the mint"""
        rpc = Mock()
        rpc.get_token_accounts_by_owner.return_value = [
            _token_account(USDC, 1_500_000, 6),
            _token_account(USDC, 250_000, 6),
        ]

        balance = WalletModule(rpc).get_balance_of_token(OWNER, USDC)

        assert balance == Decimal("1.75")
        rpc.get_token_accounts_by_owner.assert_called_once_with(OWNER, mint=USDC)

    def test_no_accounts(self):
        """Test balance is zero without token accounts"""
        rpc = Mock()
        rpc.get_token_accounts_by_owner.return_value = []

        assert WalletModule(rpc).get_balance_of_token(OWNER, USDC) == Decimal(0)

    def test_skips_unparsed_accounts(self):
        """Test accounts without parsed data are skipped"""
        rpc = Mock()
        rpc.get_token_accounts_by_owner.return_value = [
            {"account": {"data": ["AAAA", "base64"]}},
            _token_account(USDC, 1_000_000, 6),
        ]

        assert WalletModule(rpc).get_balance_of_token(OWNER, USDC) == Decimal(1)


class TestGetAccountTokens:
    """Test full wallet listing"""

    def test_scans_both_token_programs(self):
        """Test listing merges accounts across both token programs"""
        rpc = Mock()

        def accounts(owner, program_id=None):
            if program_id == TOKEN_PROGRAM_ID:
                return [_token_account(USDC, 2_000_000, 6), _token_account(USDC, 500_000, 6)]
            return [_token_account(TOKEN22, 7, 0)]

        rpc.get_token_accounts_by_owner.side_effect = accounts

        tokens = WalletModule(rpc).get_account_tokens(OWNER)

        assert set(tokens) == {USDC, TOKEN22}
        usdc = tokens[USDC]
        assert isinstance(usdc, TokenBalance)
        assert usdc.balance == Decimal("2.5")
        assert usdc.raw_amount == 2_500_000
        assert usdc.decimals == 6
        assert usdc.symbol == "USDC"
        assert tokens[TOKEN22].balance == Decimal(7)

        programs = [c.kwargs["program_id"] for c in rpc.get_token_accounts_by_owner.call_args_list]
        assert programs == [TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID]

    def test_empty_wallet(self):
        """Test empty wallet lists no tokens"""
        rpc = Mock()
        rpc.get_token_accounts_by_owner.return_value = []

        assert WalletModule(rpc).get_account_tokens(OWNER) == {}
