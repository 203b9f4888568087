"""Release tag composition, sanitizing and reference deduplication."""

from collections.abc import Iterable

from release_tagger.models.domain import TaskReference

MAX_TAG_LENGTH = 50

# "/" and ":" are rejected or overloaded in ClickUp tag names
_TAG_TRANSLATION = str.maketrans({"/": "-", ":": "-"})


def sanitize_tag_name(label: str) -> str:
    """Make a release label acceptable as a ClickUp tag.

    Replaces every ``/`` and ``:`` with ``-`` and truncates the result to
    50 characters. Never fails.

    Example:
        >>> sanitize_tag_name("release/2024:v1")
        'release-2024-v1'
    """
    return label.translate(_TAG_TRANSLATION)[:MAX_TAG_LENGTH]


def compose_release_tag(prefix: str | None, label: str) -> str:
    """Prepend the configured tag prefix to the release label (unsanitized)."""
    return f"{prefix or ''}{label}"


def deduplicate_references(references: Iterable[TaskReference]) -> list[TaskReference]:
    """Collapse repeated references, keeping the first occurrence of each.

    Insertion order is preserved for stable logs; callers must not depend on it.
    """
    return list(dict.fromkeys(references))
