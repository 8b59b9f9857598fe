import logging
import subprocess
from pathlib import Path

from rich.console import Console
from rich.text import Text

from .constants import APP_NAME, GIT_EXECUTABLE
from .errors import ExecutionError, NotFoundError

logger = logging.getLogger(APP_NAME)
err_console = Console(stderr=True)


class GitRunner:
    """Runs git as a child process and captures its output.

    This is the only place git-glide touches the repository. Every verb is a
    sequence of `run` calls, each blocking until the child exits.

    Attributes:
        cwd (Path): The directory git runs in.
        executable (str): The git binary to launch.
        debug (bool): Echo every command and its raw output to stderr.
        check (bool): Treat a non-zero exit status as an ExecutionError.
    """

    def __init__(
        self,
        cwd: Path,
        executable: str = GIT_EXECUTABLE,
        debug: bool = False,
        check: bool = True,
    ):
        self.cwd = cwd
        self.executable = executable
        self.debug = debug
        self.check = check

    def run(self, args: list[str]) -> str:
        """Executes a git command and returns its standard output.

        Args:
            args (list[str]): A list of arguments to pass to git.

        Returns:
            str: The raw (untrimmed) stdout of the command.

        Raises:
            ExecutionError: If git could not be launched, its output is not
                            valid text, or (when `check` is set) it exited
                            with a non-zero status.
        """
        cmd = [self.executable, *args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            res = subprocess.run(cmd, cwd=self.cwd, capture_output=True)
        except OSError as e:
            raise ExecutionError(cmd, f"Failed to launch {cmd[0]}: {e}") from e

        try:
            stdout = res.stdout.decode("utf-8")
            stderr = res.stderr.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ExecutionError(
                cmd, f"Undecodable output from {' '.join(cmd)}: {e}"
            ) from e

        if self.debug:
            err_console.print(Text(f"$ {' '.join(cmd)}", style="dim"))
            if stdout:
                err_console.print(stdout, markup=False, highlight=False, end="")
            if stderr:
                err_console.print(
                    stderr, style="yellow", markup=False, highlight=False, end=""
                )

        if res.returncode != 0:
            if self.check:
                raise ExecutionError(
                    cmd,
                    f"Git error: {stderr.strip() or stdout.strip() or res.returncode}",
                    returncode=res.returncode,
                    stderr=stderr,
                )
            logger.debug(f"Ignoring exit status {res.returncode} of {cmd}")

        return stdout


class GitRepo:
    """Primitive git operations for a working copy.

    Each method maps to a single git invocation through the runner; none of
    them inspect repository internals directly.

    Attributes:
        runner (GitRunner): The runner all commands go through.
    """

    def __init__(self, runner: GitRunner):
        self.runner = runner

    @classmethod
    def open(
        cls,
        path: Path,
        executable: str = GIT_EXECUTABLE,
        debug: bool = False,
        check: bool = True,
    ) -> "GitRepo":
        """Builds a GitRepo for an existing working copy.

        Args:
            path (Path): Any directory inside the working copy.
            executable (str): The git binary to launch.
            debug (bool): Echo commands and output to stderr.
            check (bool): Treat non-zero exit status as failure.

        Raises:
            NotFoundError: If `path` does not exist.
        """
        if not path.is_dir():
            raise NotFoundError(f"directory {path}")
        return cls(GitRunner(path, executable=executable, debug=debug, check=check))

    def _run(self, args: list[str]) -> str:
        return self.runner.run(args)

    def current_branch(self) -> str:
        """Retrieves the abbreviated name of the currently checked-out branch.

        Returns:
            str: The branch name, with the trailing newline removed.
        """
        return self._run(["rev-parse", "--abbrev-ref", "HEAD"]).strip()

    def fetch(self, remote: str) -> None:
        self._run(["fetch", remote])

    def push(self, remote: str, branch: str) -> None:
        self._run(["push", remote, branch])

    def rebase(self, upstream: str) -> None:
        """Replays the current branch's unpublished commits on top of `upstream`."""
        self._run(["rebase", upstream])

    def checkout(self, branch: str) -> None:
        self._run(["checkout", branch])

    def checkout_new_branch(self, branch: str) -> None:
        """Creates `branch` at the current commit and switches to it."""
        self._run(["checkout", "-b", branch])

    def commit(self, message: str) -> None:
        self._run(["commit", "-m", message])

    def add(self, pattern: str) -> None:
        self._run(["add", "--", pattern])

    def add_all(self) -> None:
        """Stages all changes, including deletions and untracked files."""
        self._run(["add", "--all"])

    def unstage(self, pattern: str | None = None) -> None:
        """Removes paths from the index, leaving the working tree untouched.

        Args:
            pattern (str | None): A path pattern; everything when omitted.
        """
        cmd = ["reset", "--quiet"]
        if pattern:
            cmd.extend(["--", pattern])
        self._run(cmd)

    def reset_hard(self) -> None:
        self._run(["reset", "--hard"])

    def stash_push(self, message: str, keep_index: bool = False) -> None:
        """Pushes a labeled stash entry.

        Args:
            message (str): The label stored with the entry.
            keep_index (bool): Leave the index (and the matching working tree)
                               in place instead of reverting to HEAD.
        """
        cmd = ["stash", "push"]
        if keep_index:
            cmd.append("--keep-index")
        cmd.extend(["-m", message])
        self._run(cmd)

    def stash_list(self) -> str:
        return self._run(["stash", "list"])

    def stash_pop(self, reference: str) -> None:
        self._run(["stash", "pop", reference])

    def rev_list_count(self, revision_range: str) -> str:
        """Returns the raw output of `git rev-list --count` for a range."""
        return self._run(["rev-list", "--count", revision_range])

    def status_porcelain(self) -> list[str]:
        """Returns the porcelain (machine-readable) status lines."""
        output = self._run(["status", "--porcelain"])
        return output.splitlines() if output else []

    def clone(self, url: str, destination: Path) -> None:
        self._run(["clone", url, str(destination)])
