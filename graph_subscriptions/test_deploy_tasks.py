#!/usr/bin/env python3
"""
Tests for the deploy and deploy:registry tasks
Deployment helpers are mocked, so no network or artifacts are needed
"""

import logging
import pytest
from unittest.mock import patch, MagicMock

from graph_subscriptions.errors import ConfigurationError, DeploymentError
from graph_subscriptions.tasks import registry

TOKEN = '0xAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA'
DEPLOYER = '0x1111111111111111111111111111111111111111'
OWNER = '0x70997970C51812dc3A010C7d01b50e0d17dc79C8'


def make_env(*addresses):
    """Build a runtime environment double with one signer per address"""
    signers = []
    for address in addresses:
        signer = MagicMock()
        signer.address = address
        signers.append(signer)
    env = MagicMock()
    env.get_signers.return_value = signers
    env.config.deployments_file = None
    return env, signers


class TestDeployTask:
    """Test class for the deploy task"""

    @patch('graph_subscriptions.tasks.deploy.deploy_subscriptions')
    def test_no_accounts_fails_before_deploying(self, mock_deploy):
        """Test that an empty signer list raises a configuration error"""
        env, _ = make_env()
        with pytest.raises(ConfigurationError, match='No accounts available'):
            registry.run_task('deploy', {'token': TOKEN}, env)
        mock_deploy.assert_not_called()

    @patch('graph_subscriptions.tasks.deploy.deploy_subscriptions')
    def test_default_epoch_seconds(self, mock_deploy):
        """Test that epochSeconds defaults to 3"""
        env, signers = make_env(DEPLOYER)
        registry.run_task('deploy', {'token': TOKEN}, env)
        mock_deploy.assert_called_once_with([TOKEN, 3], signers[0], deployments_file=None)

    @patch('graph_subscriptions.tasks.deploy.deploy_subscriptions')
    def test_epoch_seconds_forwarded_unchanged(self, mock_deploy):
        """Test that a non-default epoch length reaches the deployment helper"""
        env, signers = make_env(DEPLOYER)
        registry.run_task('deploy', {'token': TOKEN, 'epochSeconds': 10}, env)
        mock_deploy.assert_called_once_with([TOKEN, 10], signers[0], deployments_file=None)

    @patch('graph_subscriptions.tasks.deploy.deploy_subscriptions')
    def test_scenario_single_signer(self, mock_deploy, caplog):
        """Test --token 0xAAAA... --epochSeconds 7 with signer 0x1111..."""
        env, signers = make_env(DEPLOYER)
        with caplog.at_level(logging.INFO):
            registry.run_task('deploy', {'token': TOKEN, 'epochSeconds': 7}, env)

        assert mock_deploy.call_count == 1
        args, _ = mock_deploy.call_args
        assert args == ([TOKEN, 7], signers[0])
        assert f"Deploying subscriptions contract with the account: {DEPLOYER}" in caplog.text

    @patch('graph_subscriptions.tasks.deploy.deploy_subscriptions')
    def test_first_signer_is_deployer(self, mock_deploy):
        """Test that only the first of several signers is used"""
        env, signers = make_env(DEPLOYER, OWNER)
        registry.run_task('deploy', {'token': TOKEN}, env)
        args, _ = mock_deploy.call_args
        assert args[1] is signers[0]

    @patch('graph_subscriptions.tasks.deploy.deploy_subscriptions')
    def test_deployments_file_passed_from_config(self, mock_deploy):
        """Test that the configured deployments file is handed to the helper"""
        env, signers = make_env(DEPLOYER)
        env.config.deployments_file = 'deployment.json'
        registry.run_task('deploy', {'token': TOKEN}, env)
        mock_deploy.assert_called_once_with([TOKEN, 3], signers[0], deployments_file='deployment.json')

    @patch('graph_subscriptions.tasks.deploy.deploy_subscriptions')
    def test_deployment_error_propagates(self, mock_deploy):
        """Test that helper failures are not caught or retried"""
        mock_deploy.side_effect = DeploymentError('reverted')
        env, _ = make_env(DEPLOYER)
        with pytest.raises(DeploymentError, match='reverted'):
            registry.run_task('deploy', {'token': TOKEN}, env)
        assert mock_deploy.call_count == 1

    def test_missing_token_rejected(self):
        """Test that the required token parameter is enforced"""
        env, _ = make_env(DEPLOYER)
        with pytest.raises(ValueError, match="token"):
            registry.run_task('deploy', {}, env)


class TestDeployRegistryTask:
    """Test class for the deploy:registry task"""

    @patch('graph_subscriptions.tasks.deploy.deploy_registry')
    def test_no_accounts_fails_before_deploying(self, mock_deploy):
        """Test that an empty signer list raises a configuration error"""
        env, _ = make_env()
        with pytest.raises(ConfigurationError, match='No accounts available'):
            registry.run_task('deploy:registry', {'owner': OWNER}, env)
        mock_deploy.assert_not_called()

    @patch('graph_subscriptions.tasks.deploy.deploy_registry')
    def test_valid_owner_transfers_ownership(self, mock_deploy, caplog):
        """Test that a valid owner triggers exactly one transfer"""
        env, signers = make_env(DEPLOYER)
        deployed = mock_deploy.return_value

        with caplog.at_level(logging.INFO):
            registry.run_task('deploy:registry', {'owner': OWNER}, env)

        mock_deploy.assert_called_once_with(signers[0], deployments_file=None)
        deployed.connect.assert_called_once_with(signers[0])
        deployed.connect.return_value.transfer_ownership.assert_called_once_with(OWNER)
        assert f"Transferring ownership to {OWNER}" in caplog.text

    @patch('graph_subscriptions.tasks.deploy.deploy_registry')
    def test_lowercase_owner_is_valid(self, mock_deploy):
        """Test that an all-lowercase address counts as valid"""
        env, _ = make_env(DEPLOYER)
        registry.run_task('deploy:registry', {'owner': OWNER.lower()}, env)
        mock_deploy.return_value.connect.return_value.transfer_ownership.assert_called_once_with(OWNER.lower())

    @pytest.mark.parametrize('owner', [
        None,
        '',
        'not-an-address',
        '0x1234',
        # mixed case with a broken checksum
        '0x70997970c51812dc3A010C7d01b50e0d17dc79C8',
    ])
    @patch('graph_subscriptions.tasks.deploy.deploy_registry')
    def test_missing_or_malformed_owner_skips_transfer(self, mock_deploy, owner):
        """Test that the transfer is silently skipped"""
        env, signers = make_env(DEPLOYER)
        args = {} if owner is None else {'owner': owner}

        result = registry.run_task('deploy:registry', args, env)

        mock_deploy.assert_called_once_with(signers[0], deployments_file=None)
        mock_deploy.return_value.connect.assert_not_called()
        assert result is mock_deploy.return_value

    @patch('graph_subscriptions.tasks.deploy.deploy_registry')
    def test_transfer_error_propagates(self, mock_deploy):
        """Test that a failing ownership transfer is fatal"""
        mock_deploy.return_value.connect.return_value.transfer_ownership.side_effect = DeploymentError('reverted')
        env, _ = make_env(DEPLOYER)
        with pytest.raises(DeploymentError):
            registry.run_task('deploy:registry', {'owner': OWNER}, env)


class TestTaskCommandLine:
    """Test class for parsing task arguments from the command line"""

    def test_deploy_arguments(self):
        """Test that epochSeconds is parsed as an integer"""
        parser = registry.build_parser()
        args = parser.parse_args(['deploy', '--token', TOKEN, '--epochSeconds', '7'])
        assert args.task == 'deploy'
        assert args.token == TOKEN
        assert args.epochSeconds == 7

    def test_deploy_default_epoch(self):
        """Test the command-line default for epochSeconds"""
        args = registry.build_parser().parse_args(['deploy', '--token', TOKEN])
        assert args.epochSeconds == 3

    def test_non_integer_epoch_is_usage_error(self):
        """Test that a non-integer epoch length exits with status 2"""
        with pytest.raises(SystemExit) as exc_info:
            registry.build_parser().parse_args(['deploy', '--token', TOKEN, '--epochSeconds', 'soon'])
        assert exc_info.value.code == 2

    def test_token_is_required(self):
        """Test that deploy without --token exits with status 2"""
        with pytest.raises(SystemExit) as exc_info:
            registry.build_parser().parse_args(['deploy'])
        assert exc_info.value.code == 2

    def test_registry_owner_optional(self):
        """Test that deploy:registry parses with and without an owner"""
        parser = registry.build_parser()
        assert parser.parse_args(['deploy:registry']).owner is None
        assert parser.parse_args(['deploy:registry', '--owner', OWNER]).owner == OWNER
