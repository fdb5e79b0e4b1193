"""
program_insights.ingestion - Loading input snapshots.

Modules:
  snapshot - JSON snapshot of programs + beneficiaries -> validated records.
"""
