"""Find sibling repositories that share the working repo's suffix.

Projects are laid out as <root>/<project>/<project>-<suffix>, e.g.
sites/shop/shop-backend next to sites/blog/blog-backend.
"""
from pathlib import Path
from typing import List, Optional

from multicommitter.core.logger import get_logger
from multicommitter.services.git_manager import is_git_repo

logger = get_logger(__name__)


def repo_suffix(repo: Path) -> Optional[str]:
    """Return the part of the directory name after the first hyphen."""
    name = Path(repo).name
    if "-" not in name:
        return None
    return name.split("-", 1)[1] or None


def discover_sibling_repos(working_repo) -> List[Path]:
    """List sibling repos with the same suffix, excluding working_repo."""
    working = Path(working_repo).resolve()
    suffix = repo_suffix(working)
    if suffix is None:
        logger.warning(f"{working.name} has no '-<suffix>' to match siblings on")
        return []

    grandparent = working.parent.parent
    logger.debug(f"Scanning {grandparent} for '*-{suffix}' repositories")

    found = []
    for project in sorted(grandparent.iterdir()):
        if not project.is_dir():
            continue
        candidate = project / f"{project.name}-{suffix}"
        if candidate.is_dir() and is_git_repo(candidate) and candidate.resolve() != working:
            found.append(candidate.resolve())

    return found
