"""Carrying uncommitted changes across branch transitions.

Before a branch switch the working tree is pushed onto the stash stack under a
label derived from the branch it belongs to. After the switch, the stack is
searched for the label of the branch now checked out and only that entry is
popped. Entries for other branches may sit anywhere in the stack, so entries
are always looked up by label and never by position.
"""

import logging
import re
from dataclasses import dataclass

from .constants import APP_NAME, STASH_LINE_PATTERN, STASH_TAG_PREFIX
from .git_wrapper import GitRepo

logger = logging.getLogger(APP_NAME)

_STASH_LINE = re.compile(STASH_LINE_PATTERN)


@dataclass(frozen=True)
class StashRecord:
    """A single entry of `git stash list`.

    Attributes:
        reference (str): The stack position, e.g. `stash@{2}`.
        message (str): The rest of the line, e.g. `On main: git-glide:main`.
    """

    reference: str
    message: str

    @property
    def label(self) -> str:
        """The user-supplied part of the message, after `On <branch>: `."""
        _, sep, label = self.message.partition(": ")
        return label if sep else ""


def stash_tag(branch: str, prefix: str = STASH_TAG_PREFIX) -> str:
    """Derives the stash label owned by `branch`.

    Git forbids `:` in branch names, so distinct branches never share a tag.
    """
    return f"{prefix}:{branch}"


def parse_stash_list(output: str) -> list[StashRecord]:
    """Parses `git stash list` output into records.

    Lines that are not labeled entries (`stash@{N}: On ...`) are skipped.
    """
    records = []
    for line in output.splitlines():
        match = _STASH_LINE.match(line)
        if match:
            records.append(StashRecord(match.group(1), match.group(2)))
    return records


def find_stash(records: list[StashRecord], tag: str) -> StashRecord | None:
    """Returns the most recent record labeled exactly `tag`.

    Records whose message merely contains the tag (for example the tag of
    `feat` inside the tag of `feature`) are not matches.
    """
    for record in records:
        if tag not in record.message:
            continue
        if record.label == tag:
            return record
        logger.debug(f"Skipping {record.reference}: '{record.message}' != {tag}")
    return None


class ChangePreserver:
    """Stashes and restores uncommitted changes per branch.

    Attributes:
        repo (GitRepo): The repository whose changes are preserved.
        prefix (str): The stash tag prefix.
    """

    def __init__(self, repo: GitRepo, prefix: str = STASH_TAG_PREFIX):
        self.repo = repo
        self.prefix = prefix

    def preserve(self, keep_staged: bool = False) -> None:
        """Stashes every local change under the current branch's tag.

        Args:
            keep_staged (bool): Record the stash but leave the changes staged in
                                the index and working tree. When False the
                                working tree is left clean.
        """
        branch = self.repo.current_branch()
        tag = stash_tag(branch, self.prefix)

        self.repo.add_all()
        self.repo.stash_push(tag, keep_index=keep_staged)
        logger.info(f"Preserved changes on '{branch}' as '{tag}'")

    def restore(self) -> StashRecord | None:
        """Pops the stash owned by the current branch, if there is one.

        The popped changes are left unstaged.

        Returns:
            StashRecord | None: The entry that was popped, or None when the
                                branch had nothing preserved.
        """
        branch = self.repo.current_branch()
        tag = stash_tag(branch, self.prefix)

        record = find_stash(parse_stash_list(self.repo.stash_list()), tag)
        if record is None:
            logger.info(f"No preserved changes for '{branch}'")
            return None

        self.repo.stash_pop(record.reference)
        self.repo.unstage()
        logger.info(f"Restored {record.reference} ('{tag}') onto '{branch}'")
        return record
