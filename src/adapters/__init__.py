"""Concrete Slack, GitHub, and logging adapters for the core ports."""
