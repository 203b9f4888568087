"""Core domain models for the release tagger.

Key Models:
    - TaskReference: Normalized ClickUp task reference (``CU-<id>``)
    - CommitRecord: Commit message read from GitHub
    - PullRequestRecord: Merged pull request resolved from a merge commit
    - ReleaseContext: Event kind, ref and release details for one run
    - TagOutcome: Final state of one reference in the tag applier
    - RunResult: Aggregate counts returned to the caller

Enums:
    - EventKind: push, release, other
    - SelectionMode: Which commits are in scope for the run
    - TagState: Per-reference tag/comment state machine

Example:
    >>> from release_tagger.models.domain import TaskReference
    >>> TaskReference("CU-abc123").task_id
    'abc123'
"""
