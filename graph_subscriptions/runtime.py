"""
Runtime environment handed to every task: a web3 connection plus the
signing accounts configured through PRIVATE_KEY or MNEMONIC.
"""

import logging
from typing import Any, Dict, List, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.middleware import ExtraDataToPOAMiddleware

from .config import Settings
from .errors import ConfigurationError, DeploymentError

logger = logging.getLogger(__name__)

HD_PATH_PREFIX = "m/44'/60'/0'/0"


def accounts_from_private_keys(private_keys: str) -> List[LocalAccount]:
    """Builds one account per comma-separated private key, in order."""
    accounts = []
    for key in private_keys.split(','):
        key = key.strip()
        if not key:
            continue
        try:
            accounts.append(Account.from_key(key))
        except Exception as e:
            raise ConfigurationError(f"PRIVATE_KEY contains an invalid key: {e}")
    return accounts


def accounts_from_mnemonic(mnemonic: str, count: int = 1) -> List[LocalAccount]:
    """Derives `count` accounts along m/44'/60'/0'/0/<i>."""
    Account.enable_unaudited_hdwallet_features()
    accounts = []
    for index in range(count):
        try:
            accounts.append(Account.from_mnemonic(mnemonic.strip(), account_path=f"{HD_PATH_PREFIX}/{index}"))
        except Exception as e:
            raise ConfigurationError(f"MNEMONIC could not be used to derive accounts: {e}")
    return accounts


class Signer:
    """A local account bound to a web3 connection that can send transactions."""

    def __init__(self, account: LocalAccount, env: "RuntimeEnvironment"):
        self.account = account
        self.env = env

    @property
    def address(self) -> str:
        return self.account.address

    def __repr__(self):
        return f"Signer({self.address})"

    def __eq__(self, other):
        return isinstance(other, Signer) and other.address == self.address

    def __hash__(self):
        return hash(self.address)

    def transaction_params(self) -> Dict[str, Any]:
        w3 = self.env.w3
        params = {
            'from': self.address,
            'nonce': w3.eth.get_transaction_count(self.address),
            'chainId': self.env.chain_id,
        }
        if self.env.config.gas_limit:
            params['gas'] = self.env.config.gas_limit
        return params

    def send_transaction(self, tx: Dict[str, Any]):
        """Signs and sends `tx`, then waits for a successful receipt."""
        w3 = self.env.w3
        signed_tx = self.account.sign_transaction(tx)
        tx_hash = w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        logger.info(f"Transaction sent: {tx_hash.hex()}")

        receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.env.config.tx_timeout)
        if receipt['status'] != 1:
            raise DeploymentError(f"Transaction {tx_hash.hex()} reverted in block {receipt['blockNumber']}")
        logger.info(f"Transaction confirmed in block: {receipt['blockNumber']}")
        return receipt

    def transact(self, contract_call):
        """Builds a contract function or constructor call from this signer and sends it."""
        tx = contract_call.build_transaction(self.transaction_params())
        return self.send_transaction(tx)


class RuntimeEnvironment:
    def __init__(self, config: Settings, w3: Optional[Web3] = None):
        self.config = config
        self._w3 = w3
        self._chain_id = config.chain_id
        self._signers: Optional[List[Signer]] = None

    @property
    def w3(self) -> Web3:
        if self._w3 is None:
            self._w3 = self._connect()
        return self._w3

    def _connect(self) -> Web3:
        w3 = Web3(Web3.HTTPProvider(self.config.rpc_url))
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
        if not w3.is_connected():
            raise ConfigurationError(f"Could not connect to RPC URL: {self.config.rpc_url}")
        logger.info(f"Connected to blockchain at {self.config.rpc_url}")
        return w3

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = self.w3.eth.chain_id
        return self._chain_id

    def get_signers(self) -> List[Signer]:
        """Returns the configured signers; PRIVATE_KEY takes precedence over MNEMONIC."""
        if self._signers is None:
            if self.config.private_key:
                accounts = accounts_from_private_keys(self.config.private_key)
            elif self.config.mnemonic:
                accounts = accounts_from_mnemonic(self.config.mnemonic, self.config.accounts_count)
            else:
                accounts = []
            self._signers = [Signer(account, self) for account in accounts]
        return list(self._signers)
