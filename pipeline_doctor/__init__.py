"""Receive CI job webhooks from GitHub and GitLab, diagnose failures and plan corrective actions."""

__version__ = "0.1.0"