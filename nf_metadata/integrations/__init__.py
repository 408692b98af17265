"""
External system integrations.

Upstream metadata clients live under this namespace so they remain decoupled
from app entrypoints (`api/`) and CLI scripts (`scripts/`).
"""
