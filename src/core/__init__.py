"""Core domain package for slack-github-issues.

Core contains rule matching, in-flight deduplication, and the issue-filing
pipeline without any Slack, GitHub, or HTTP-specific code, keeping the
business logic portable.
"""
