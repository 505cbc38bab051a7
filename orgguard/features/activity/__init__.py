"""
Activity log feature module.

Best-effort, human-readable trace of actions for observability.
"""
