"""notebudget - content budgeting for LLM-backed note assistants.

This package estimates token counts, prioritizes sentence fragments and
budgets model context windows, splitting long notes into ordered chunks.

Exports:
    __version__: Package version string.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.3.0"
