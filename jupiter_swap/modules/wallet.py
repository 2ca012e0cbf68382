"""
Wallet Module

Token balance lookups for a wallet address.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Tuple, TYPE_CHECKING

from ..types import TokenBalance, TokensObject, symbol_for_mint
from ..types.solana_tokens import TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID

if TYPE_CHECKING:
    from ..infra import RpcClient

logger = logging.getLogger(__name__)


def _parse_token_account(account: Dict[str, Any]) -> Optional[Tuple[str, int, int]]:
    """Extract (mint, raw_amount, decimals) from a jsonParsed token account entry"""
    info = account.get("account", {}).get("data", {})
    if not isinstance(info, dict):
        return None
    info = info.get("parsed", {}).get("info", {})
    mint = info.get("mint")
    token_amount = info.get("tokenAmount", {})
    amount = token_amount.get("amount")
    if not mint or amount is None:
        return None
    return mint, int(amount), int(token_amount.get("decimals", 0))


class WalletModule:
    """
    Wallet balance queries

    Usage:
        wallet = WalletModule(rpc)
        bonk = wallet.get_balance_of_token(owner, BONK_MINT)
        tokens = wallet.get_account_tokens(owner)
    """

    def __init__(self, rpc: "RpcClient"):
        self._rpc = rpc

    def get_balance_of_token(self, owner: str, mint: str) -> Decimal:
        """
        Get a wallet's balance of one token

        Args:
            owner: Wallet public key (base58)
            mint: Token mint address

        Returns:
            Balance in UI units summed over all of the owner's accounts for the mint
        """
        accounts = self._rpc.get_token_accounts_by_owner(owner, mint=mint)

        total = Decimal(0)
        for account in accounts:
            parsed = _parse_token_account(account)
            if parsed is None:
                continue
            _, raw, decimals = parsed
            total += Decimal(raw) / Decimal(10 ** decimals)

        logger.debug(f"Balance of {mint} for {owner}: {total}")
        return total

    def get_account_tokens(
        self,
        owner: str,
        program_ids: Iterable[str] = (TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID),
    ) -> TokensObject:
        """
        Get all token balances of a wallet

        Args:
            owner: Wallet public key (base58)
            program_ids: Token programs to scan

        Returns:
            Balances keyed by mint; accounts sharing a mint are merged
        """
        raw_totals: Dict[str, int] = {}
        decimals_by_mint: Dict[str, int] = {}

        for program_id in program_ids:
            for account in self._rpc.get_token_accounts_by_owner(owner, program_id=program_id):
                parsed = _parse_token_account(account)
                if parsed is None:
                    continue
                mint, raw, decimals = parsed
                raw_totals[mint] = raw_totals.get(mint, 0) + raw
                decimals_by_mint[mint] = decimals

        tokens: TokensObject = {}
        for mint, raw in raw_totals.items():
            decimals = decimals_by_mint[mint]
            tokens[mint] = TokenBalance(
                mint=mint,
                balance=Decimal(raw) / Decimal(10 ** decimals),
                decimals=decimals,
                raw_amount=raw,
                symbol=symbol_for_mint(mint),
            )

        logger.debug(f"Found {len(tokens)} tokens for {owner}")
        return tokens
