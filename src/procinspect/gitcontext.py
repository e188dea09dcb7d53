"""Git repository and branch lookup for a working directory."""

import logging
from pathlib import Path

from procinspect.models import GitContext

logger = logging.getLogger(__name__)

MAX_DEPTH = 256
GITDIR_PREFIX = "gitdir: "
REF_PREFIX = "ref: "


def _find_git_dir(directory: Path) -> Path | None:
    """Return the git dir of a checkout rooted at directory, if any."""
    dot_git = directory / ".git"
    try:
        if dot_git.is_dir():
            return dot_git
        if not dot_git.is_file():
            return None
        # Worktrees and submodules use a .git file pointing elsewhere.
        content = dot_git.read_text(errors="replace").strip()
    except OSError as exc:
        logger.debug("cannot inspect %s: %s", dot_git, exc)
        return None
    if content.startswith(GITDIR_PREFIX):
        return directory / content[len(GITDIR_PREFIX) :].strip()
    return None


def read_branch(git_dir: Path) -> str:
    """
    Return the branch checked out in git_dir.

    Only the final segment of the ref is kept, so refs/heads/feature/login
    yields 'login'. A detached HEAD yields ''.
    """
    try:
        head = (git_dir / "HEAD").read_text(errors="replace").strip()
    except OSError as exc:
        logger.debug("cannot read HEAD in %s: %s", git_dir, exc)
        return ""
    if not head.startswith(REF_PREFIX):
        return ""
    return head[len(REF_PREFIX) :].rsplit("/", 1)[-1]


def resolve_git_context(working_dir: str) -> GitContext:
    """
    Walk up from working_dir to the nearest git checkout.

    The filesystem root itself is never treated as a checkout.
    """
    current = Path(working_dir)
    for _ in range(MAX_DEPTH):
        if current == current.parent:
            break
        git_dir = _find_git_dir(current)
        if git_dir is not None:
            return GitContext(repo=current.name, branch=read_branch(git_dir))
        current = current.parent
    return GitContext()
