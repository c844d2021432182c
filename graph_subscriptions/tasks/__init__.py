"""
Deployment Tasks
================

Importing this package registers every task on the shared registry:
- deploy: Deploy the Subscriptions contract
- deploy:registry: Deploy the SubscriptionsRegistry contract
"""

from .registry import TaskDefinition, TaskRegistry, registry, task, types
from . import deploy  # noqa: F401  registers the deploy tasks

__all__ = ['TaskDefinition', 'TaskRegistry', 'registry', 'task', 'types']
