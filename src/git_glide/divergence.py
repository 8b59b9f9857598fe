import logging
import re
from typing import NamedTuple

from .constants import APP_NAME
from .errors import ParseError
from .git_wrapper import GitRepo

logger = logging.getLogger(APP_NAME)

_COUNT = re.compile(r"\d+")


class Divergence(NamedTuple):
    """How far a local branch and its remote counterpart have drifted apart.

    Attributes:
        ahead (int): Local commits not yet published.
        behind (int): Remote commits not yet integrated.
    """

    ahead: int
    behind: int


def _count(repo: GitRepo, revision_range: str) -> int:
    output = repo.rev_list_count(revision_range)
    value = output.strip()
    if not _COUNT.fullmatch(value):
        raise ParseError(
            ["rev-list", "--count", revision_range],
            output,
            f"Expected a commit count for {revision_range}, got '{value}'",
        )
    return int(value)


def count_divergence(repo: GitRepo, branch: str, remote: str) -> Divergence:
    """Counts the commits separating `branch` from `<remote>/<branch>`.

    Args:
        repo (GitRepo): The repository to query.
        branch (str): The local branch name.
        remote (str): The remote the branch tracks.

    Returns:
        Divergence: The (ahead, behind) pair.

    Raises:
        ParseError: If either count is not a non-negative integer, which is
                    what git prints when the remote branch does not exist and
                    exit status checking is disabled.
    """
    upstream = f"{remote}/{branch}"
    ahead = _count(repo, f"{upstream}..{branch}")
    behind = _count(repo, f"{branch}..{upstream}")
    logger.debug(f"{branch} vs {upstream}: {ahead} ahead, {behind} behind")
    return Divergence(ahead, behind)
