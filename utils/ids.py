"""
Opaque id generation for products, variants and reference records.
"""

import uuid


def new_id() -> str:
    """Return a new globally-unique opaque id."""
    return str(uuid.uuid4())
