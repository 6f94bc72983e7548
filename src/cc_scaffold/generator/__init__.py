"""Rendering and writing of configuration files."""

from .catalog import AGENTS, HOOKS, SKILLS, list_components, render_component
from .config_generator import ConfigGenerator, render_claude_md, render_settings

__all__ = [
    "AGENTS",
    "HOOKS",
    "SKILLS",
    "ConfigGenerator",
    "list_components",
    "render_component",
    "render_claude_md",
    "render_settings",
]
