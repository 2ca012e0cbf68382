"""Command line entry point: python -m jupiter_swap {buy,sell,balance,balances}"""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import replace
from decimal import Decimal
from typing import List, Optional

from .client import buy_token, sell_token, get_token_balance, get_tokens_balances
from .config import LoggingConfig, config, setup_logging
from .errors import SwapAdapterError
from .types import BuyConfig, SellConfig


def _add_connection_args(parser: argparse.ArgumentParser, with_private_key: bool) -> None:
    parser.add_argument("--rpc", default=config.rpc.url, help="RPC endpoint (default: $SOLANA_RPC_URL)")
    if with_private_key:
        parser.add_argument(
            "--private-key",
            default=config.signer.private_key,
            help="Base58 private key (default: $SOLANA_PRIVATE_KEY)",
        )


def _add_swap_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--slippage", type=float, default=config.trading.default_slippage,
                        help="Slippage in percent (default: %(default)s)")
    parser.add_argument("--compute-unit-limit", type=int, default=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jupiter_swap", description="Swap Solana tokens via Jupiter")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.add_argument("--log-file", default=None, help="Also log to this file (default: $LOG_FILE)")
    sub = parser.add_subparsers(dest="command", required=True)

    buy = sub.add_parser("buy", help="Spend SOL on a token")
    buy.add_argument("token", help="Mint of the token to buy")
    buy.add_argument("amount", type=Decimal, help="SOL to spend")
    _add_connection_args(buy, with_private_key=True)
    _add_swap_args(buy)

    sell = sub.add_parser("sell", help="Sell a token for SOL")
    sell.add_argument("token", help="Mint of the token to sell")
    group = sell.add_mutually_exclusive_group(required=True)
    group.add_argument("--all", action="store_true", dest="sell_all", help="Sell the whole balance")
    group.add_argument("--amount", type=Decimal, help="Amount to sell")
    _add_connection_args(sell, with_private_key=True)
    _add_swap_args(sell)

    balance = sub.add_parser("balance", help="Balance of one token")
    balance.add_argument("wallet", help="Wallet public key")
    balance.add_argument("token", help="Token mint")
    _add_connection_args(balance, with_private_key=False)

    balances = sub.add_parser("balances", help="All token balances")
    balances.add_argument("wallet", help="Wallet public key")
    _add_connection_args(balances, with_private_key=False)

    return parser


def cli_logging_config(args: argparse.Namespace) -> LoggingConfig:
    """Console logging, plus a file only when one is asked for"""
    return replace(
        config.logging,
        log_file=args.log_file or os.getenv("LOG_FILE", ""),
        log_level=args.log_level or config.logging.log_level,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(cli_logging_config(args))

    try:
        if args.command == "buy":
            print(buy_token(BuyConfig(
                rpc_endpoint=args.rpc,
                wallet_private_key=args.private_key,
                address_of_token_to_buy=args.token,
                amount_of_solana_to_spend=args.amount,
                slippage=args.slippage,
                compute_unit_limit=args.compute_unit_limit,
            )))
        elif args.command == "sell":
            print(sell_token(SellConfig(
                sell_all=args.sell_all,
                rpc_endpoint=args.rpc,
                wallet_private_key=args.private_key,
                address_of_token_to_sell=args.token,
                amount_of_token_to_sell=args.amount,
                slippage=args.slippage,
                compute_unit_limit=args.compute_unit_limit,
            )))
        elif args.command == "balance":
            print(get_token_balance(args.rpc, args.wallet, args.token))
        else:
            for token in get_tokens_balances(args.rpc, args.wallet).values():
                print(token)
    except SwapAdapterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
