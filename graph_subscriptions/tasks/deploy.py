import logging

from ..deploy import deploy_registry, deploy_subscriptions, is_valid_address
from ..errors import ConfigurationError
from .registry import task, types

logger = logging.getLogger(__name__)

NO_ACCOUNTS_MESSAGE = 'No accounts available, set PRIVATE_KEY or MNEMONIC env variables'


def _get_deployer(env):
    accounts = env.get_signers()
    if len(accounts) == 0:
        raise ConfigurationError(NO_ACCOUNTS_MESSAGE)
    return accounts[0]


def deploy_subscriptions_action(task_args, env):
    deployer = _get_deployer(env)
    logger.info(f"Deploying subscriptions contract with the account: {deployer.address}")

    return deploy_subscriptions(
        [task_args['token'], task_args['epochSeconds']],
        deployer,
        deployments_file=env.config.deployments_file,
    )


def deploy_registry_action(task_args, env):
    deployer = _get_deployer(env)
    logger.info(f"Deploying registry contract with the account: {deployer.address}")

    registry = deploy_registry(deployer, deployments_file=env.config.deployments_file)

    owner = task_args.get('owner')
    if is_valid_address(owner):
        logger.info(f"Transferring ownership to {owner}")
        registry.connect(deployer).transfer_ownership(owner)
    elif owner:
        logger.debug(f"Owner {owner!r} is not a valid address, keeping ownership with the deployer")
    return registry


task('deploy', 'Deploy the subscription contract (use L2 network!)') \
    .add_param('token', 'Address of the ERC20 token') \
    .add_optional_param('epochSeconds', 'Epoch length in seconds.', 3, types.int) \
    .set_action(deploy_subscriptions_action)

task('deploy:registry', 'Deploy the registry contract (use L2 network!)') \
    .add_optional_param('owner', 'Address of the contract owner') \
    .set_action(deploy_registry_action)
