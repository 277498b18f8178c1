"""Threat rules: templates and the workload dispatch table."""

from .ruleset import TEMPLATES, ThreatTemplate, generate_threats

__all__ = ["TEMPLATES", "ThreatTemplate", "generate_threats"]
