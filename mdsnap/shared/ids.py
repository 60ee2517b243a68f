"""
ID generation helpers.
"""

import uuid


def generate_id(prefix: str) -> str:
    """Generate a short prefixed identifier, e.g. ``run_1a2b3c4d5e6f``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def generate_request_id() -> str:
    return generate_id("req")


def generate_run_id() -> str:
    return generate_id("run")
