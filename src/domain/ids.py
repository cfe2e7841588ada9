"""Identifier generation for domain entities."""

import uuid


def new_id() -> str:
    """Return a new opaque entity id."""
    return uuid.uuid4().hex
