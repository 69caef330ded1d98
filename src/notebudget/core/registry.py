"""Command discovery for the notebudget CLI.

Command modules live in `notebudget.commands` and expose plain functions.
`_FUNCTION_COMMANDS` lists which functions each module contributes; the
CLI name is the function name with underscores turned into dashes.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandSpec:
    name: str
    handler: Callable[..., None]
    module: str


_FUNCTION_COMMANDS: dict[str, tuple[str, ...]] = {
    "budget": ("limits", "tokens", "window", "chunk", "prioritize", "optimize"),
}


def _command_name(attr: str) -> str:
    return attr.replace("_", "-")


def _specs_for(module_name: str, module: ModuleType) -> list[CommandSpec]:
    specs: list[CommandSpec] = []
    for attr in _FUNCTION_COMMANDS.get(module_name, ()):
        handler = getattr(module, attr, None)
        if not callable(handler):
            logger.error("Command %s.%s not found or not callable", module_name, attr)
            continue
        specs.append(CommandSpec(name=_command_name(attr), handler=handler, module=module_name))
    return specs


def discover_commands(package_path: Path, package: str = "notebudget.commands") -> list[CommandSpec]:
    """Import every command module under `package_path` and collect its commands.

    Modules that fail to import are logged and skipped so one broken module
    does not take the whole CLI down.
    """
    commands: list[CommandSpec] = []
    for file in sorted(package_path.glob("*.py")):
        if file.name.startswith("_") or file.stem not in _FUNCTION_COMMANDS:
            continue
        try:
            module = importlib.import_module(f"{package}.{file.stem}")
        except ImportError as exc:
            logger.error("Failed to import command module %s: %s", file.stem, exc)
            continue
        commands.extend(_specs_for(file.stem, module))
    return commands
