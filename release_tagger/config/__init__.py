"""Configuration for the release tagger.

Key Components:
    - TaggerSettings: Run settings with YAML loading and environment overrides

Example:
    >>> from release_tagger.config.settings import TaggerSettings
    >>> settings = TaggerSettings.load("release-tagger.yaml", tag_prefix="released-")
    >>> settings.tag_prefix
    'released-'
"""
