"""
Base building blocks:
internal identity for persisted entities.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain.

    Equality stays identity-based (``eq=False``) so the ORM identity map and the
    domain agree on what "the same row" means.
    """

    id: UUID = field(default_factory=new_id)
