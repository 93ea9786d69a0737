"""Resolution of short contextual tokens (such as ``t1``) to database IDs."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["ResolvedID", "resolve", "placeholder_examples"]


@dataclass(frozen=True)
class ResolvedID:
    """An ID resolved from a contextual token."""

    original_token: str
    database_id: str
    context_type: str


_KNOWN_TOKENS: dict[str, tuple[str, str]] = {
    "t1": ("task-db-id-1", "task"),
    "p2": ("project-db-id-2", "project"),
    "n3": ("note-db-id-3", "note"),
}


def resolve(context_type: str, token: str) -> ResolvedID:
    """Return the database ID a token refers to.

    Raises LookupError when the token is unknown.
    """
    try:
        database_id, resolved_type = _KNOWN_TOKENS[token]
    except KeyError:
        raise LookupError(
            f"token '{token}' not found in context '{context_type}'"
        ) from None
    return ResolvedID(
        original_token=token, database_id=database_id, context_type=resolved_type
    )


def placeholder_examples() -> list[str]:
    """Return example contextual IDs for help texts."""
    return [
        "t1 (resolves to a task)",
        "p2 (resolves to a project)",
        "n3 (resolves to a note)",
        "e.g., <command> t1",
    ]