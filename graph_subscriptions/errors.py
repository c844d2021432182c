"""Exceptions raised by the deployment tasks."""


class ConfigurationError(Exception):
    """Raised when the environment does not provide what a task needs."""


class ArtifactError(Exception):
    """Raised when a compiled contract artifact is missing or incomplete."""


class DeploymentError(Exception):
    """Raised when a transaction reverts or a deployment yields no contract."""
