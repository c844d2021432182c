"""
Graph Subscriptions Deployment
==============================

Tasks for deploying and managing the Graph Subscriptions contracts.

Structure:
- tasks/: Task registration and the deploy tasks
- runtime: Web3 connection and signers built from the environment
- deploy: Contract deployment helpers
"""

__version__ = "1.0.0"
__author__ = "Graph Subscriptions Team"
