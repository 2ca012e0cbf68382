"""
Buy and sell request configuration

Both dataclasses also accept the upper-case keys used in .env files
(RPC_ENDPOINT, WALLET_PRIVATE_KEY, ...).
"""

from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Union

from ..config import config as global_config

Amount = Union[Decimal, float, int, str]


def _default_slippage() -> float:
    return global_config.trading.default_slippage


_KEY_ALIASES: Dict[str, str] = {
    "RPC_ENDPOINT": "rpc_endpoint",
    "WALLET_PRIVATE_KEY": "wallet_private_key",
    "ADDRESS_OF_TOKEN_TO_BUY": "address_of_token_to_buy",
    "AMOUNT_OF_SOLANA_TO_SPEND": "amount_of_solana_to_spend",
    "SELL_ALL": "sell_all",
    "ADDRESS_OF_TOKEN_TO_SELL": "address_of_token_to_sell",
    "AMOUNT_OF_TOKEN_TO_SELL": "amount_of_token_to_sell",
    "SLIPPAGE": "slippage",
    "computeUnitLimit": "compute_unit_limit",
    "COMPUTE_UNIT_LIMIT": "compute_unit_limit",
}


def _normalize(cls, data: Mapping[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(cls)}
    kwargs = {}
    for key, value in data.items():
        name = _KEY_ALIASES.get(key, key)
        if name in known:
            kwargs[name] = value
    # Missing slippage falls back to the configured default
    if kwargs.get("slippage") is None:
        kwargs.pop("slippage", None)
    return kwargs


@dataclass
class BuyConfig:
    """Spend SOL to buy a token"""
    rpc_endpoint: str
    wallet_private_key: str
    address_of_token_to_buy: str
    amount_of_solana_to_spend: Amount
    slippage: float = field(default_factory=_default_slippage)
    compute_unit_limit: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BuyConfig":
        kwargs = _normalize(cls, data)
        kwargs.setdefault("rpc_endpoint", "")
        kwargs.setdefault("wallet_private_key", "")
        kwargs.setdefault("address_of_token_to_buy", "")
        kwargs.setdefault("amount_of_solana_to_spend", None)
        return cls(**kwargs)


@dataclass
class SellConfig:
    """Sell a token (all of it, or a fixed amount) for SOL"""
    sell_all: bool
    rpc_endpoint: str
    wallet_private_key: str
    address_of_token_to_sell: str
    amount_of_token_to_sell: Optional[Amount] = None
    slippage: float = field(default_factory=_default_slippage)
    compute_unit_limit: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SellConfig":
        kwargs = _normalize(cls, data)
        kwargs["sell_all"] = bool(kwargs.get("sell_all", False))
        kwargs.setdefault("rpc_endpoint", "")
        kwargs.setdefault("wallet_private_key", "")
        kwargs.setdefault("address_of_token_to_sell", "")
        return cls(**kwargs)
