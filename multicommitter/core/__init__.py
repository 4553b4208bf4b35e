"""Change-set synchronization core."""
