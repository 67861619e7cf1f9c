"""
auth/models.py -- Domain dataclass for the user record.

Pattern: Data class (pure data container, zero logic). The store maps it to and
from MongoDB documents; routes map it to API response models.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    id is None until the store inserts the record; MongoDB assigns an ObjectId
    and the store hands it back as a 24-char hex string.

    hashed_password holds the bcrypt hash. The raw password never reaches this
    object.
    """

    name: str
    email: str
    hashed_password: str
    id: str | None = None
