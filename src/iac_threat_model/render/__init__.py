"""Renderers for threat model documents."""

from .json_renderer import parse_json, render_json
from .markdown import render_markdown

__all__ = ["parse_json", "render_json", "render_markdown"]
