"""
Test library entry points and CLI

SwapClient is patched so nothing touches the network.
"""

import sys
import logging
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from jupiter_swap import client as client_module
from jupiter_swap import __main__ as cli
from jupiter_swap.client import (
    buy_token,
    sell_token,
    get_token_balance,
    get_tokens_balances,
    create_connection,
)
from jupiter_swap.errors import ConfigurationError, InsufficientFunds
from jupiter_swap.types import BuyConfig, SellConfig

RPC = "https://rpc.example.com"
TOKEN = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"


@pytest.fixture
def swap_client():
    """Patch SwapClient; yields (class_mock, instance used inside the with-block)"""
    with patch.object(client_module, "SwapClient") as cls:
        instance = MagicMock()
        instance.pubkey = "Wallet111"
        cls.return_value.__enter__.return_value = instance
        yield cls, instance


def test_create_connection_requires_endpoint():
    """Test create_connection rejects an empty endpoint"""
    with pytest.raises(ConfigurationError):
        create_connection("")


class TestBuyToken:
    """Test buy_token"""

    @pytest.mark.parametrize("overrides,message", [
        ({"rpc_endpoint": ""}, "No RPC endpoint specified"),
        ({"wallet_private_key": ""}, "No wallet private key specified"),
        ({"address_of_token_to_buy": ""}, "No token address specified"),
        ({"amount_of_solana_to_spend": None}, "You need to specify AMOUNT_OF_SOLANA_TO_SPEND"),
    ])
    def test_validation(self, swap_client, overrides, message):
        """Test buy_token validates each field before opening a connection"""
        values = {
            "rpc_endpoint": RPC,
            "wallet_private_key": "secret",
            "address_of_token_to_buy": TOKEN,
            "amount_of_solana_to_spend": Decimal("0.1"),
        }
        values.update(overrides)

        with pytest.raises(ConfigurationError) as exc_info:
            buy_token(BuyConfig(**values))

        assert exc_info.value.message == message
        swap_client[0].assert_not_called()

    def test_buy(self, swap_client):
        """Test buy_token passes upper-case config keys through to SwapModule.buy"""
        cls, instance = swap_client
        instance.swap.buy.return_value = "SIG"

        sig = buy_token({
            "RPC_ENDPOINT": RPC,
            "WALLET_PRIVATE_KEY": "secret",
            "ADDRESS_OF_TOKEN_TO_BUY": TOKEN,
            "AMOUNT_OF_SOLANA_TO_SPEND": 0.1,
            "SLIPPAGE": 2,
            "computeUnitLimit": 200_000,
        })

        assert sig == "SIG"
        cls.assert_called_once_with(RPC, private_key="secret")
        instance.swap.buy.assert_called_once_with(TOKEN, 0.1, 2, compute_unit_limit=200_000)


class TestSellToken:
    """Test sell_token"""

    def test_amount_required_when_not_selling_all(self, swap_client):
        """Test sell_token needs an amount when SELL_ALL is false"""
        with pytest.raises(ConfigurationError) as exc_info:
            sell_token(SellConfig(
                sell_all=False,
                rpc_endpoint=RPC,
                wallet_private_key="secret",
                address_of_token_to_sell=TOKEN,
            ))

        assert exc_info.value.message == "You need to specify AMOUNT_OF_TOKEN_TO_SELL if SELL_ALL is false"
        swap_client[0].assert_not_called()

    def test_amount_check_comes_first(self, swap_client):
        """Test the sell amount check runs before the other validations"""
        with pytest.raises(ConfigurationError) as exc_info:
            sell_token(SellConfig(
                sell_all=False,
                rpc_endpoint="",
                wallet_private_key="",
                address_of_token_to_sell="",
            ))

        assert "AMOUNT_OF_TOKEN_TO_SELL" in exc_info.value.message

    def test_sell_all(self, swap_client):
        """Test sell_token sells the signer's whole balance"""
        cls, instance = swap_client
        instance.swap.sell.return_value = "SIG"

        sig = sell_token(SellConfig(
            sell_all=True,
            rpc_endpoint=RPC,
            wallet_private_key="secret",
            address_of_token_to_sell=TOKEN,
            slippage=1,
        ))

        assert sig == "SIG"
        instance.swap.sell.assert_called_once_with(
            TOKEN,
            1,
            sell_all=True,
            amount_of_token_to_sell=None,
            owner="Wallet111",
            compute_unit_limit=None,
        )

    def test_errors_propagate(self, swap_client):
        """Test library errors from the swap reach the caller unchanged"""
        _, instance = swap_client
        instance.swap.sell.side_effect = InsufficientFunds.nothing_to_sell(TOKEN)

        with pytest.raises(InsufficientFunds):
            sell_token({
                "SELL_ALL": True,
                "RPC_ENDPOINT": RPC,
                "WALLET_PRIVATE_KEY": "secret",
                "ADDRESS_OF_TOKEN_TO_SELL": TOKEN,
            })


class TestBalances:
    """Test balance entry points"""

    def test_tokens_balances_validation_order(self, swap_client):
        """Test get_tokens_balances checks wallet then endpoint"""
        with pytest.raises(ConfigurationError) as exc_info:
            get_tokens_balances("", "")
        assert exc_info.value.message == "No wallet public key specified"

        with pytest.raises(ConfigurationError) as exc_info:
            get_tokens_balances("", "Wallet111")
        assert exc_info.value.message == "No RPC endpoint specified"

        swap_client[0].assert_not_called()

    def test_token_balance_validation_order(self, swap_client):
        """Test get_token_balance checks token, wallet, then endpoint"""
        with pytest.raises(ConfigurationError) as exc_info:
            get_token_balance("", "", "")
        assert exc_info.value.message == "No token address specified"

        with pytest.raises(ConfigurationError) as exc_info:
            get_token_balance("", "", TOKEN)
        assert exc_info.value.message == "No wallet public key specified"

        with pytest.raises(ConfigurationError) as exc_info:
            get_token_balance("", "Wallet111", TOKEN)
        assert exc_info.value.message == "No RPC endpoint specified"

    def test_token_balance(self, swap_client):
        """Test get_token_balance returns the wallet module's balance"""
        cls, instance = swap_client
        instance.wallet.get_balance_of_token.return_value = Decimal("3.5")

        assert get_token_balance(RPC, "Wallet111", TOKEN) == Decimal("3.5")
        cls.assert_called_once_with(RPC)
        instance.wallet.get_balance_of_token.assert_called_once_with("Wallet111", TOKEN)

    def test_tokens_balances(self, swap_client):
        """Test get_tokens_balances returns the wallet module's listing"""
        _, instance = swap_client
        instance.wallet.get_account_tokens.return_value = {}

        assert get_tokens_balances(RPC, "Wallet111") == {}
        instance.wallet.get_account_tokens.assert_called_once_with("Wallet111")


class TestCli:
    """Test command line entry point"""

    @patch.object(cli, "setup_logging")
    @patch.object(cli, "buy_token", return_value="SIG")
    def test_buy(self, mock_buy, _logging, capsys):
        """Test `buy` sub-command prints the signature"""
        code = cli.main(["buy", TOKEN, "0.25", "--rpc", RPC, "--private-key", "secret", "--slippage", "0.5"])

        assert code == 0
        assert "SIG" in capsys.readouterr().out
        request = mock_buy.call_args.args[0]
        assert request.amount_of_solana_to_spend == Decimal("0.25")
        assert request.slippage == 0.5

    @patch.object(cli, "setup_logging")
    @patch.object(cli, "sell_token", side_effect=InsufficientFunds.nothing_to_sell(TOKEN))
    def test_sell_error_exit_code(self, _sell, _logging, capsys):
        """Test library errors exit with status 1 on stderr"""
        code = cli.main(["sell", TOKEN, "--all", "--rpc", RPC, "--private-key", "secret"])

        assert code == 1
        assert "No tokens to sell" in capsys.readouterr().err

    @patch.object(cli, "setup_logging")
    @patch.object(cli, "sell_token", return_value="SIG")
    def test_sell_amount(self, mock_sell, _logging):
        """Test `sell --amount` builds a fixed-amount request"""
        cli.main(["sell", TOKEN, "--amount", "10", "--rpc", RPC, "--private-key", "secret"])

        request = mock_sell.call_args.args[0]
        assert request.sell_all is False
        assert request.amount_of_token_to_sell == Decimal("10")

    def test_sell_requires_mode(self):
        """Test `sell` needs either --all or --amount"""
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["sell", TOKEN])


class TestCliLogging:
    """Test logging setup of the command line entry point"""

    @staticmethod
    def _reset_package_logger():
        logger = logging.getLogger("jupiter_swap")
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    def test_console_only_by_default(self, monkeypatch):
        """Test no log file is configured unless one is asked for"""
        monkeypatch.delenv("LOG_FILE", raising=False)
        level_before = cli.config.logging.log_level
        args = cli.build_parser().parse_args(["balances", "Wallet111", "--rpc", RPC, "--log-level", "DEBUG"])

        log_config = cli.cli_logging_config(args)

        assert log_config.log_file == ""
        assert log_config.log_level == "DEBUG"
        assert cli.config.logging.log_level == level_before

    def test_log_file_from_environment(self, monkeypatch, tmp_path):
        """Test LOG_FILE enables file logging"""
        monkeypatch.setenv("LOG_FILE", str(tmp_path / "env.log"))
        args = cli.build_parser().parse_args(["balances", "Wallet111", "--rpc", RPC])

        assert cli.cli_logging_config(args).log_file == str(tmp_path / "env.log")

    @patch.object(cli, "get_tokens_balances", return_value={})
    def test_main_writes_nothing_into_package(self, _balances, monkeypatch):
        """Test a CLI run without a log file leaves the package directory untouched"""
        monkeypatch.delenv("LOG_FILE", raising=False)
        package_log_dir = Path(cli.__file__).parent / "log"
        before = set(package_log_dir.glob("*.log")) if package_log_dir.exists() else set()

        try:
            assert cli.main(["balances", "Wallet111", "--rpc", RPC]) == 0
        finally:
            self._reset_package_logger()

        after = set(package_log_dir.glob("*.log")) if package_log_dir.exists() else set()
        assert after == before

    @patch.object(cli, "get_tokens_balances", return_value={})
    def test_main_log_file_flag(self, _balances, tmp_path):
        """Test --log-file writes the run's log to the given path"""
        log_file = tmp_path / "cli.log"

        try:
            assert cli.main(["--log-file", str(log_file), "balances", "Wallet111", "--rpc", RPC]) == 0
        finally:
            self._reset_package_logger()

        assert log_file.exists()
        assert "Logging initialized" in log_file.read_text()
