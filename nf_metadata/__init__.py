"""
Shared library code for the title metadata gateway.

This package is intended to hold code that is reused across:
- the FastAPI gateway in `api/`
- the client-side search orchestrator and CLI tools in `scripts/`

App entrypoints (FastAPI routers, CLI scripts) should live outside this package and
import from `nf_metadata` rather than the other way around.
"""
