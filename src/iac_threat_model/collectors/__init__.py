"""Collectors that turn infrastructure definitions into threat facts."""

from .cloudformation import CollectedFacts, collect_from_template

__all__ = ["CollectedFacts", "collect_from_template"]
