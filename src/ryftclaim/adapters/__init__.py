"""Adapters connecting the claim domain to external services."""
