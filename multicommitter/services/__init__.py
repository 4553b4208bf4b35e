"""Wrappers around external tools (git, gh, rsync)."""
