"""
Client-side search orchestration against the metadata gateway.

The orchestrator owns loading/error/result state and feeds the history,
analytics and rate-budget trackers. Rendering is left to the caller.
"""
