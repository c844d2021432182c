import os
import json
import logging
import tempfile
from typing import Any, Dict, Optional, Sequence

from web3 import Web3

from .artifacts import load_artifact
from .errors import DeploymentError
from .runtime import Signer

logger = logging.getLogger(__name__)

SUBSCRIPTIONS_CONTRACT = "Subscriptions"
REGISTRY_CONTRACT = "SubscriptionsRegistry"


def is_valid_address(value) -> bool:
    """Hex address check that also rejects mixed-case addresses with a bad checksum."""
    if not value or not Web3.is_address(value):
        return False
    hex_part = value[2:] if value[:2].lower() == '0x' else value
    if hex_part == hex_part.lower() or hex_part == hex_part.upper():
        return True
    return Web3.is_checksum_address(value)


class DeployedContract:
    """A deployed contract together with the signer that sends its transactions."""

    def __init__(self, contract, signer: Signer):
        self.contract = contract
        self.signer = signer

    @property
    def address(self) -> str:
        return self.contract.address

    def connect(self, signer: Signer) -> "DeployedContract":
        return DeployedContract(self.contract, signer)

    def transfer_ownership(self, new_owner: str):
        if not is_valid_address(new_owner):
            raise DeploymentError(f"Refusing to transfer ownership to invalid address {new_owner!r}")
        checksum_owner = Web3.to_checksum_address(new_owner)
        return self.signer.transact(self.contract.functions.transferOwnership(checksum_owner))


def _write_json_atomic(path: str, data: Dict[str, Any]):
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(prefix='.deployment-', suffix='.json', dir=directory)
    try:
        with os.fdopen(fd, 'w') as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def record_deployment(deployments_file: str, key: str, address: str, chain_id: int, deployer: str) -> bool:
    """Merges a deployed address into the deployment JSON read by the off-chain tools.

    Failures are logged and reported through the return value, never raised.
    An unreadable existing file is left untouched.
    """
    try:
        addresses: Dict[str, Any] = {}
        if os.path.exists(deployments_file):
            with open(deployments_file, 'r') as f:
                addresses = json.load(f)
            if not isinstance(addresses, dict):
                raise ValueError(f"expected a JSON object, found {type(addresses).__name__}")

        addresses[key] = address
        addresses['chainId'] = chain_id
        addresses['deployer'] = deployer

        _write_json_atomic(deployments_file, addresses)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to record {key} at {address} in {deployments_file}: {e}")
        return False

    logger.info(f"Recorded {key} at {address} in {deployments_file}")
    return True


def deploy_contract(name: str, args: Sequence[Any], signer: Signer) -> DeployedContract:
    """Deploys the named artifact with constructor `args` from `signer`."""
    env = signer.env
    artifact = load_artifact(env.config.artifacts_dir, name)
    w3 = env.w3

    factory = w3.eth.contract(abi=artifact['abi'], bytecode=artifact['bytecode'])
    logger.info(f"Deploying {name} with args {list(args)}")
    receipt = signer.transact(factory.constructor(*args))

    contract_address = receipt.get('contractAddress')
    if not contract_address:
        raise DeploymentError(f"Deployment of {name} returned no contract address")

    logger.info(f"{name} deployed at {contract_address}")
    contract = w3.eth.contract(address=contract_address, abi=artifact['abi'])
    return DeployedContract(contract, signer)


def deploy_subscriptions(params: Sequence[Any], signer: Signer,
                         deployments_file: Optional[str] = None) -> DeployedContract:
    """Deploys the Subscriptions contract; `params` is [token address, epoch seconds]."""
    token, epoch_seconds = params
    subscriptions = deploy_contract(
        SUBSCRIPTIONS_CONTRACT,
        [Web3.to_checksum_address(token), int(epoch_seconds)],
        signer,
    )
    if deployments_file:
        record_deployment(deployments_file, 'subscriptions', subscriptions.address,
                          signer.env.chain_id, signer.address)
    return subscriptions


def deploy_registry(signer: Signer, deployments_file: Optional[str] = None) -> DeployedContract:
    """Deploys the SubscriptionsRegistry contract."""
    registry = deploy_contract(REGISTRY_CONTRACT, [], signer)
    if deployments_file:
        record_deployment(deployments_file, 'registry', registry.address,
                          signer.env.chain_id, signer.address)
    return registry
