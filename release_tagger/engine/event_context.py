"""
Release context from GitHub Actions events.

Turns the workflow's event name, event payload and ref into the
ReleaseContext the selector works from.
"""

import json
from pathlib import Path
from typing import Any

import structlog

from release_tagger.exceptions import ConfigurationError
from release_tagger.models.domain import EventKind, ReleaseContext

log = structlog.get_logger(__name__)

_REF_PREFIXES = ("refs/heads/", "refs/tags/")


def short_ref_name(ref: str | None) -> str:
    """Strip ``refs/heads/`` or ``refs/tags/`` from a full ref."""
    if not ref:
        return ""
    for prefix in _REF_PREFIXES:
        if ref.startswith(prefix):
            return ref[len(prefix) :]
    return ref


def load_event_payload(path: str | Path | None) -> dict[str, Any]:
    """Read the event payload JSON written by the Actions runner.

    Args:
        path: Path to the payload file (GITHUB_EVENT_PATH); None or empty means no payload

    Returns:
        The payload object, or an empty dict when no path is given

    Raises:
        ConfigurationError: If the file cannot be read or is not a JSON object
    """
    if not path:
        return {}

    event_file = Path(path)
    try:
        content = event_file.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read event payload: {path}") from e

    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in event payload {path}: {e}") from e

    if not isinstance(payload, dict):
        raise ConfigurationError("Event payload must be a JSON object")
    return payload


def repository_from_payload(payload: dict[str, Any]) -> tuple[str, str] | None:
    """Return (owner, name) from the payload's repository object, if present."""
    repository = payload.get("repository")
    if not isinstance(repository, dict):
        return None
    owner = repository.get("owner")
    owner_login = owner.get("login") if isinstance(owner, dict) else None
    name = repository.get("name")
    if not owner_login or not name:
        return None
    return owner_login, name


def build_release_context(
    event_name: str | None,
    payload: dict[str, Any],
    ref: str | None,
    include_previous_release: bool = False,
    release_name: str | None = None,
) -> ReleaseContext:
    """Classify the event and derive the release label.

    A push with a ref is a branch push. Otherwise a payload carrying a
    ``release`` object is a release. Anything else falls back to the ref.
    The label is release_name when given, else the release name or tag,
    else the short ref name.

    Args:
        event_name: GITHUB_EVENT_NAME (e.g. "push", "release")
        payload: Parsed event payload
        ref: GITHUB_REF (e.g. "refs/heads/main")
        include_previous_release: Diff against the previous release when possible
        release_name: Explicit label overriding the derived one

    Returns:
        ReleaseContext for the run
    """
    ref_name = short_ref_name(ref)
    release = payload.get("release")

    if event_name == "push" and ref:
        context = ReleaseContext(
            event_kind=EventKind.PUSH,
            ref_name=ref_name,
            release_label=release_name or ref_name,
            include_previous_release=include_previous_release,
        )
    elif isinstance(release, dict) and release.get("tag_name"):
        tag = release["tag_name"]
        context = ReleaseContext(
            event_kind=EventKind.RELEASE,
            ref_name=ref_name or tag,
            release_tag=tag,
            release_label=release_name or release.get("name") or tag,
            include_previous_release=include_previous_release,
        )
    else:
        context = ReleaseContext(
            event_kind=EventKind.OTHER,
            ref_name=ref_name,
            release_label=release_name or ref_name,
            include_previous_release=include_previous_release,
        )

    log.info(
        "event_classified",
        event_name=event_name,
        event_kind=context.event_kind.value,
        ref=context.ref_name,
        release_tag=context.release_tag,
        release_label=context.release_label,
    )
    return context
