"""CLI command modules discovered by `notebudget.core.registry`."""
