"""Exclusion policy for build artifacts, caches and VCS metadata."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Iterable, List, Set

from multicommitter.core.config import DEFAULT_BACKUP_DIR_NAME


class MatchKind(Enum):
    PREFIX = "prefix"  # leading directory component(s)
    SUFFIX = "suffix"  # file name ending
    EXACT = "exact"  # whole path or file name


@dataclass(frozen=True)
class PathMatcher:
    """One declarative exclusion rule."""
    kind: MatchKind
    pattern: str

    def matches(self, rel_path: str) -> bool:
        path = PurePosixPath(rel_path)
        if self.kind is MatchKind.PREFIX:
            prefix = PurePosixPath(self.pattern.strip("/"))
            return path.parts[:len(prefix.parts)] == prefix.parts
        if self.kind is MatchKind.SUFFIX:
            return path.name.endswith(self.pattern)
        return rel_path == self.pattern or path.name == self.pattern


DEFAULT_PREFIXES = [
    "bin/",
    "obj/",
    "Migrations/",
    ".cache/",
    ".git/",
    "node_modules/",
    "build/",
    "dist/",
]
DEFAULT_SUFFIXES = [".log", ".lock", ".props", ".targets"]
DEFAULT_EXACT = [".eslintcache"]


@dataclass
class ExclusionPolicy:
    """Ordered list of matchers; a path is excluded when any matcher hits.

    The backup directory is always excluded by its literal configured name.
    """
    matchers: List[PathMatcher] = field(default_factory=list)
    backup_dir_name: str = DEFAULT_BACKUP_DIR_NAME

    def __post_init__(self):
        self.matchers = list(self.matchers)
        backup_rule = PathMatcher(MatchKind.PREFIX, f"{self.backup_dir_name}/")
        if backup_rule not in self.matchers:
            self.matchers.append(backup_rule)

    @classmethod
    def default(cls, backup_dir_name: str = DEFAULT_BACKUP_DIR_NAME) -> "ExclusionPolicy":
        matchers = [PathMatcher(MatchKind.PREFIX, p) for p in DEFAULT_PREFIXES]
        matchers += [PathMatcher(MatchKind.SUFFIX, s) for s in DEFAULT_SUFFIXES]
        matchers += [PathMatcher(MatchKind.EXACT, e) for e in DEFAULT_EXACT]
        return cls(matchers=matchers, backup_dir_name=backup_dir_name)

    def is_excluded(self, rel_path: str) -> bool:
        return any(m.matches(rel_path) for m in self.matchers)

    def filter(self, paths: Iterable[str]) -> Set[str]:
        """Return the paths that survive the policy."""
        return {p for p in paths if p and not self.is_excluded(p)}
