# vermietertools/core/security/ownership.py
"""
Ownership scoping for data owned by a user (properties, people, units).

A caller may only see rows whose user_id equals the resolved identity's
user id. Soft-deleted rows (is_active false) stay hidden unless asked for.
"""

from sqlalchemy import Select

from vermietertools.models.identity import Identity


def scope_to_owner(stmt: Select, model, identity: Identity, *, active_only: bool = True) -> Select:
    """
    Restrict a select to rows owned by the identity.

    Args:
        stmt: The select to restrict
        model: Mapped class with a user_id column (and optionally is_active)
        identity: Resolved identity of the caller
        active_only: Hide soft-deleted rows
    """
    if not hasattr(model, "user_id"):
        raise TypeError(f"{model.__name__} has no user_id column to scope by")

    stmt = stmt.where(model.user_id == identity.user_id)
    if active_only and hasattr(model, "is_active"):
        stmt = stmt.where(model.is_active.is_(True))
    return stmt
