"""
Taskflow
Blueprint registry.
"""

from flask import request


def query_filters(*names: str) -> dict:
    """Non-empty query-string values for ``names`` (stripped)."""
    out = {}
    for name in names:
        value = (request.args.get(name) or "").strip()
        if value:
            out[name] = value
    return out
