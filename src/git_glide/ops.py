import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from .config import Config
from .constants import APP_NAME, REPO_NAME_PATTERN
from .divergence import Divergence, count_divergence
from .errors import GlideError, NotFoundError
from .git_wrapper import GitRepo, GitRunner
from .stash import ChangePreserver, StashRecord

logger = logging.getLogger(APP_NAME)

_REPO_NAME = re.compile(REPO_NAME_PATTERN)


def repository_name(url: str) -> str:
    """Extracts the repository name from a clone URL.

    Works for scp-style (`git@host:org/repo.git`) and HTTP(S) URLs, with or
    without the `.git` suffix.

    Raises:
        NotFoundError: If no name can be found at the end of the URL.
    """
    match = _REPO_NAME.search(url)
    if not match:
        raise NotFoundError(f"repository name in '{url}'")
    return match.group(1)


def clone(url: str, parent: Path, config: Config | None = None) -> Path:
    """Clones `url` into a directory named after the repository.

    Args:
        url (str): The remote URL.
        parent (Path): The directory the clone is created in.
        config (Config | None): Git invocation settings. Defaults to Config().

    Returns:
        Path: The path of the new working copy.
    """
    config = config or Config()
    destination = parent / repository_name(url)
    runner = GitRunner(
        parent,
        executable=config.git.executable,
        debug=config.git.debug,
        check=config.git.check_exit_status,
    )
    GitRepo(runner).clone(url, destination)
    logger.info(f"Cloned {url} into {destination}")
    return destination


@dataclass
class StatusReport:
    """A snapshot of the working copy for display.

    Attributes:
        branch (str): The checked-out branch.
        divergence (Divergence | None): Drift from the remote branch as of the
            last fetch, or None if it could not be determined.
        changes (list[str]): Porcelain status lines.
    """

    branch: str
    divergence: Divergence | None = None
    changes: list[str] = field(default_factory=list)


class Workflow:
    """The high-level verbs, each a fail-fast sequence of git primitives.

    A failing step raises immediately and later steps never run. Nothing is
    rolled back, so a multi-step verb can stop half way (for example a failed
    checkout during `switch` leaves the changes stashed).

    `sync`, and therefore `commit`, compare against `<remote>/<branch>`. A
    branch created with `branch` has no such ref until it has been pushed once
    (`git push -u <remote> <branch>`); until then the divergence count fails,
    after `commit` has already recorded the commit.

    Attributes:
        repo (GitRepo): The working copy.
        remote (str): The remote synchronized against.
        preserver (ChangePreserver): Carries changes across branch transitions.
    """

    def __init__(self, repo: GitRepo, config: Config | None = None):
        config = config or Config()
        self.repo = repo
        self.remote = config.core.remote_name
        self.preserver = ChangePreserver(repo, config.core.stash_prefix)

    @classmethod
    def open(cls, path: Path, config: Config | None = None) -> "Workflow":
        """Builds a Workflow for the working copy at `path`."""
        config = config or Config.load(path)
        repo = GitRepo.open(
            path,
            executable=config.git.executable,
            debug=config.git.debug,
            check=config.git.check_exit_status,
        )
        return cls(repo, config)

    def sync(self) -> Divergence:
        """Fetches, rebases local commits onto the remote branch, then pushes.

        Returns:
            Divergence: The counts measured after fetching and before
                        integrating, i.e. what this sync moved.
        """
        branch = self.repo.current_branch()
        self.repo.fetch(self.remote)
        divergence = count_divergence(self.repo, branch, self.remote)
        self.repo.rebase(f"{self.remote}/{branch}")
        self.repo.push(self.remote, branch)
        logger.info(
            f"Synced '{branch}' with {self.remote}: "
            f"pushed {divergence.ahead}, pulled {divergence.behind}"
        )
        return divergence

    def switch(self, target: str) -> StashRecord | None:
        """Moves to `target`, carrying each branch's uncommitted changes with it.

        Returns:
            StashRecord | None: The changes restored on `target`, if any.
        """
        self.preserver.preserve(keep_staged=False)
        self.repo.checkout(target)
        logger.info(f"Switched to '{target}'")
        return self.preserver.restore()

    def branch(self, name: str) -> None:
        """Creates and checks out `name`, keeping local changes staged on it."""
        self.preserver.preserve(keep_staged=True)
        self.repo.checkout_new_branch(name)
        logger.info(f"Created branch '{name}'")

    def commit(self, message: str) -> Divergence:
        """Commits the staged changes and syncs the branch."""
        self.repo.commit(message)
        logger.info(f"Committed: {message}")
        return self.sync()

    def rebase(self, other: str) -> None:
        """Rebases the current branch onto an up-to-date `other`.

        The branch's uncommitted changes stay stashed until the rebase is done,
        since git refuses to rebase a dirty working tree. Conflicts are reported
        as an ExecutionError and the repository is left mid-rebase, exactly as
        git leaves it, with the changes still stashed.
        """
        original = self.repo.current_branch()
        self.switch(other)
        self.sync()
        self.preserver.preserve(keep_staged=False)
        self.repo.checkout(original)
        self.repo.rebase(other)
        logger.info(f"Rebased '{original}' onto '{other}'")
        self.preserver.restore()

    def stage(self, pattern: str) -> None:
        self.repo.add(pattern)

    def unstage(self, pattern: str) -> None:
        self.repo.unstage(pattern)

    def clear(self) -> None:
        """Irreversibly discards all local changes to tracked files."""
        self.repo.reset_hard()
        logger.warning("Discarded all local changes (hard reset)")

    def status(self) -> StatusReport:
        """Reports the branch, its drift since the last fetch, and local changes."""
        branch = self.repo.current_branch()
        try:
            divergence = count_divergence(self.repo, branch, self.remote)
        except GlideError as e:
            logger.debug(f"No divergence for '{branch}': {e}")
            divergence = None
        return StatusReport(branch, divergence, self.repo.status_porcelain())
