"""
program_insights.reporting - Formatting and export of computed analytics.

This package never computes scores itself; it renders the frozen result
objects produced by ``program_insights.analytics``.

Modules:
  formatters - ASCII terminal formatters for Typer CLI commands.
  export     - to_dict() serializers + JSON/CSV flat-file export helpers.
"""
