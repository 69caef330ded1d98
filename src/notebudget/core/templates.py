"""Centralized Jinja2 template utilities.

This module provides:
- resolve_template_root: Find the templates directory
- get_template_environment: Cached template environment factory
- render_template: Render a template by name
- render_localized: Render the variant of a template for a prompt language
- fill_placeholders: Substitute `{key}` placeholders in custom prompts
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

from notebudget.core.models import PromptLanguage

# Languages without their own template variant fall back to English.
_TEMPLATE_LANGUAGES: dict[PromptLanguage, str] = {
    PromptLanguage.GERMAN: "de",
    PromptLanguage.ENGLISH: "en",
    PromptLanguage.MULTILINGUAL: "en",
}


def resolve_template_root(custom_root: Path | None = None) -> Path:
    """Resolve the templates directory path.

    Searches in order:
    1. custom_root if provided and valid
    2. Package templates directory (notebudget/templates)

    Raises:
        FileNotFoundError: If no valid templates directory found.
    """
    if custom_root is not None and custom_root.is_dir():
        return custom_root.resolve()

    package_templates = Path(__file__).parent.parent / "templates"
    if package_templates.is_dir():
        return package_templates.resolve()

    raise FileNotFoundError("No templates directory found")


@lru_cache(maxsize=4)
def get_template_environment(template_root: Path) -> Environment:
    """Create or retrieve a cached Jinja2 Environment."""
    return Environment(
        loader=FileSystemLoader(str(template_root)),
        autoescape=False,
        undefined=StrictUndefined,
    )


def render_template(
    name: str,
    context: Mapping[str, object],
    *,
    template_root: Path | None = None,
) -> str:
    """Render a template by name with the given context.

    Raises:
        FileNotFoundError: If template or templates directory not found.
    """
    root = resolve_template_root(template_root)
    env = get_template_environment(root)
    try:
        template = env.get_template(name)
    except TemplateNotFound as exc:
        raise FileNotFoundError(f"Template {name} not found in {root}") from exc
    return template.render(**context)


def render_localized(
    base_name: str,
    language: PromptLanguage,
    context: Mapping[str, object] | None = None,
    *,
    template_root: Path | None = None,
) -> str:
    """Render `<base_name>.<lang>.j2` for the given prompt language."""
    name = f"{base_name}.{_TEMPLATE_LANGUAGES[language]}.j2"
    return render_template(name, context or {}, template_root=template_root)


def fill_placeholders(template: str, values: Mapping[str, str]) -> str:
    """Replace each `{key}` in `template` with its value; unknown keys are left intact."""
    filled = template
    for key, value in values.items():
        filled = filled.replace(f"{{{key}}}", value)
    return filled


__all__ = [
    "fill_placeholders",
    "get_template_environment",
    "render_localized",
    "render_template",
    "resolve_template_root",
]
