"""multi-committer: replicate local changes across sibling repositories."""

__version__ = "0.3.0"
