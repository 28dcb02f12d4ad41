"""Shared helpers used across the resolver, repository and CLI layers."""
