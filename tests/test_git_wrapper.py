from pathlib import Path
from unittest.mock import MagicMock

import pytest

from git_glide.errors import ExecutionError, NotFoundError
from git_glide.git_wrapper import GitRepo, GitRunner


def _completed(
    mocker: MagicMock, stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0
) -> MagicMock:
    return mocker.MagicMock(stdout=stdout, stderr=stderr, returncode=returncode)


def test_run_returns_raw_stdout(mocker: MagicMock, tmp_path: Path) -> None:
    """Verifies that the runner invokes git in its directory and returns stdout."""
    mock_run = mocker.patch(
        "subprocess.run", return_value=_completed(mocker, stdout=b"main\n")
    )

    output = GitRunner(tmp_path).run(["rev-parse", "--abbrev-ref", "HEAD"])

    assert output == "main\n"
    mock_run.assert_called_once_with(
        ["git", "rev-parse", "--abbrev-ref", "HEAD"],
        cwd=tmp_path,
        capture_output=True,
    )


def test_run_launch_failure_raises_execution_error(
    mocker: MagicMock, tmp_path: Path
) -> None:
    """Verifies that a missing binary surfaces as an ExecutionError."""
    mocker.patch("subprocess.run", side_effect=FileNotFoundError("no such file: git"))

    with pytest.raises(ExecutionError, match="Failed to launch git") as exc:
        GitRunner(tmp_path).run(["status"])

    assert exc.value.command == ["git", "status"]
    assert exc.value.returncode is None


def test_run_undecodable_output_raises_execution_error(
    mocker: MagicMock, tmp_path: Path
) -> None:
    mocker.patch("subprocess.run", return_value=_completed(mocker, stdout=b"\xff\xfe"))

    with pytest.raises(ExecutionError, match="Undecodable output"):
        GitRunner(tmp_path).run(["log"])


def test_run_nonzero_exit_raises_when_checked(
    mocker: MagicMock, tmp_path: Path
) -> None:
    """Verifies that a failing command carries its exit status and stderr."""
    mocker.patch(
        "subprocess.run",
        return_value=_completed(
            mocker, stderr=b"error: pathspec 'nope' did not match\n", returncode=1
        ),
    )

    with pytest.raises(ExecutionError, match="pathspec 'nope'") as exc:
        GitRunner(tmp_path).run(["checkout", "nope"])

    assert exc.value.returncode == 1
    assert "did not match" in exc.value.stderr


def test_run_nonzero_exit_ignored_when_unchecked(
    mocker: MagicMock, tmp_path: Path
) -> None:
    """Verifies the lenient mode treats any launched process as a success."""
    mocker.patch(
        "subprocess.run",
        return_value=_completed(mocker, stdout=b"", stderr=b"fatal", returncode=128),
    )

    assert GitRunner(tmp_path, check=False).run(["rev-list", "--count", "x"]) == ""


def test_debug_echo_does_not_alter_output(mocker: MagicMock, tmp_path: Path) -> None:
    """Verifies that debug mode echoes the command and streams, nothing more."""
    mocker.patch(
        "subprocess.run",
        return_value=_completed(mocker, stdout=b"3\n", stderr=b"warning: x\n"),
    )
    mock_console = mocker.patch("git_glide.git_wrapper.err_console")

    quiet = GitRunner(tmp_path).run(["rev-list", "--count", "a..b"])
    assert mock_console.print.call_count == 0

    loud = GitRunner(tmp_path, debug=True).run(["rev-list", "--count", "a..b"])

    assert loud == quiet == "3\n"
    printed = " ".join(str(c.args[0]) for c in mock_console.print.call_args_list)
    assert "git rev-list --count a..b" in printed
    assert "3\n" in printed
    assert "warning: x" in printed


def test_custom_executable(mocker: MagicMock, tmp_path: Path) -> None:
    mock_run = mocker.patch("subprocess.run", return_value=_completed(mocker))

    GitRunner(tmp_path, executable="/opt/git/bin/git").run(["fetch", "origin"])

    assert mock_run.call_args.args[0] == ["/opt/git/bin/git", "fetch", "origin"]


def test_open_requires_existing_directory(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError):
        GitRepo.open(tmp_path / "missing")

    repo = GitRepo.open(tmp_path, debug=True, check=False)
    assert repo.runner.cwd == tmp_path
    assert repo.runner.debug is True
    assert repo.runner.check is False


def test_current_branch_trims_output(mocker: MagicMock, tmp_path: Path) -> None:
    """Verifies that the line terminator git prints is stripped."""
    runner = GitRunner(tmp_path)
    mock_run = mocker.patch.object(runner, "run", return_value="  feature/x\n")

    assert GitRepo(runner).current_branch() == "feature/x"
    mock_run.assert_called_once_with(["rev-parse", "--abbrev-ref", "HEAD"])


def test_stash_push_modes(mocker: MagicMock, tmp_path: Path) -> None:
    """Verifies the stash arguments for the clearing and index-keeping modes."""
    runner = GitRunner(tmp_path)
    mock_run = mocker.patch.object(runner, "run", return_value="")
    repo = GitRepo(runner)

    repo.stash_push("git-glide:main")
    mock_run.assert_called_with(["stash", "push", "-m", "git-glide:main"])

    repo.stash_push("git-glide:main", keep_index=True)
    mock_run.assert_called_with(
        ["stash", "push", "--keep-index", "-m", "git-glide:main"]
    )


def test_unstage_with_and_without_pattern(mocker: MagicMock, tmp_path: Path) -> None:
    runner = GitRunner(tmp_path)
    mock_run = mocker.patch.object(runner, "run", return_value="")
    repo = GitRepo(runner)

    repo.unstage()
    mock_run.assert_called_with(["reset", "--quiet"])

    repo.unstage("src/*.py")
    mock_run.assert_called_with(["reset", "--quiet", "--", "src/*.py"])


def test_status_porcelain_splits_lines(mocker: MagicMock, tmp_path: Path) -> None:
    runner = GitRunner(tmp_path)
    mocker.patch.object(runner, "run", side_effect=[" M a.txt\n?? b.txt\n", ""])
    repo = GitRepo(runner)

    assert repo.status_porcelain() == [" M a.txt", "?? b.txt"]
    assert repo.status_porcelain() == []
