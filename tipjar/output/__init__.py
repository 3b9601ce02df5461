"""Output formatting module."""

from .formatters import JSONFormatter, OutputFormatter, TableFormatter, format_event, format_receipt

__all__ = ["JSONFormatter", "OutputFormatter", "TableFormatter", "format_event", "format_receipt"]
