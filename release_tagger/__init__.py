"""clickup-release-tagger: propagate GitHub releases to ClickUp tasks.

Finds ClickUp task references (``CU-abc123``, ``cu_abc123``, ``#abc123``) in
the commits and merged pull requests of a release or branch push, then tags
each referenced task with the release name and leaves a comment.
"""

__version__ = "0.1.0"
