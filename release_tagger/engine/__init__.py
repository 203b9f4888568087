"""Correlation and propagation engine.

This package turns a GitHub release (or branch push) into ClickUp tag
updates.

Key Components:
    - extractor: Task reference extraction from free text
    - tags: Release tag sanitizing and reference deduplication
    - source_selector: Selection mode and in-scope commits
    - pr_correlator: Merged pull requests behind merge commits
    - tag_applier: Idempotent tag + comment per task reference
    - event_context: ReleaseContext from GitHub Actions events
    - orchestrator: End-to-end run producing a RunResult

Example:
    >>> from release_tagger.engine.orchestrator import ReleaseTagOrchestrator
    >>> orchestrator = ReleaseTagOrchestrator(source, tracker, tag_prefix="released-")
    >>> result = await orchestrator.run(context)
"""

from release_tagger.engine.orchestrator import ReleaseTagOrchestrator

__all__ = ["ReleaseTagOrchestrator"]
