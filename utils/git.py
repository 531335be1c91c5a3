"""
Thin wrappers around the git command line.

All functions take the repository root explicitly and never change the
process working directory, so independent reviews can run side by side.
"""
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from utils.errors import CollectorError, CommitNotFound, DiffTooLarge, FileReadFailure
from utils.logger import logger

PathLike = Union[str, Path]

# Field separator for --pretty formats
_SEP = "\x1f"


def run_git(repo_path: PathLike, args: List[str]) -> subprocess.CompletedProcess:
    """
    Runs a git command in ``repo_path`` and returns the raw (bytes) result.

    Raises:
        CollectorError: If git is not installed.
    """
    try:
        return subprocess.run(
            ["git", *args],
            cwd=str(repo_path),
            capture_output=True,
        )
    except FileNotFoundError:
        raise CollectorError("Git is not installed or not in PATH.")


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def is_git_repository(repo_path: PathLike = ".") -> bool:
    """Checks if the given directory is inside a Git work tree."""
    try:
        result = run_git(repo_path, ["rev-parse", "--is-inside-work-tree"])
    except (CollectorError, NotADirectoryError, OSError):
        return False
    return result.returncode == 0 and _decode(result.stdout).strip() == "true"


def resolve_commit(repo_path: PathLike, ref: str) -> str:
    """
    Resolves a commit reference to its full hash.

    Raises:
        CommitNotFound: If git cannot resolve ``ref`` to a commit.
    """
    if not ref or ref.startswith("-"):
        raise CommitNotFound(f"Invalid commit reference: '{ref}'")
    result = run_git(repo_path, ["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])
    if result.returncode != 0:
        raise CommitNotFound(f"Commit '{ref}' not found in {repo_path}.")
    return _decode(result.stdout).strip()


def get_commit_fields(repo_path: PathLike, commit: str) -> List[str]:
    """
    Returns ``[author, date, subject]`` for a commit.

    Raises:
        CommitNotFound: If the commit cannot be read.
    """
    result = run_git(repo_path, ["log", "-1", f"--pretty=format:%an{_SEP}%ad{_SEP}%s", commit, "--"])
    if result.returncode != 0:
        raise CommitNotFound(f"Failed to read metadata for commit '{commit}': {_decode(result.stderr).strip()}")
    fields = _decode(result.stdout).split(_SEP)
    return (fields + ["", "", ""])[:3]


def get_commit_stat(repo_path: PathLike, commit: str) -> str:
    """Returns the ``--stat`` summary of a commit."""
    result = run_git(repo_path, ["show", "--stat", "--format=", commit, "--"])
    if result.returncode != 0:
        raise CommitNotFound(f"Failed to read stats for commit '{commit}': {_decode(result.stderr).strip()}")
    return _decode(result.stdout).strip()


def get_commit_diff(repo_path: PathLike, commit: str, max_bytes: int) -> str:
    """
    Retrieves the full ``git show`` output of a commit.

    At most ``max_bytes + 1`` bytes are read; git is killed once the output
    goes past the limit.

    Raises:
        CommitNotFound: If git fails to show the commit.
        DiffTooLarge: If the output is larger than ``max_bytes``.
    """
    # stderr goes to a file so a chatty git cannot block on a full pipe
    with tempfile.TemporaryFile() as stderr_f:
        try:
            process = subprocess.Popen(
                ["git", "show", commit, "--"],
                cwd=str(repo_path),
                stdout=subprocess.PIPE,
                stderr=stderr_f,
            )
        except FileNotFoundError:
            raise CollectorError("Git is not installed or not in PATH.")

        with process:
            data = process.stdout.read(max_bytes + 1)
            if len(data) > max_bytes:
                process.kill()
                raise DiffTooLarge(len(data), max_bytes)
            returncode = process.wait()

        if returncode != 0:
            stderr_f.seek(0)
            raise CommitNotFound(f"Failed to get diff for commit '{commit}': {_decode(stderr_f.read()).strip()}")
    return _decode(data)


def list_changed_files(repo_path: PathLike, commit: str) -> List[str]:
    """Lists the paths touched by a commit, in the order git reports them."""
    result = run_git(repo_path, ["-c", "core.quotepath=off", "diff-tree", "--no-commit-id", "--name-only", "-r", "--root", commit])
    if result.returncode != 0:
        raise CollectorError(f"Failed to list changed files: {_decode(result.stderr).strip()}", stage="changeset")
    return [line for line in _decode(result.stdout).splitlines() if line.strip()]


def read_file_at_commit(repo_path: PathLike, commit: str, path: str, max_bytes: int) -> bytes:
    """
    Reads the content of ``path`` as of ``commit``.

    Raises:
        FileReadFailure: If the blob does not exist at that commit or exceeds ``max_bytes``.
    """
    size = run_git(repo_path, ["cat-file", "-s", f"{commit}:{path}"])
    if size.returncode != 0:
        raise FileReadFailure(path, "missing", _decode(size.stderr).strip())
    try:
        blob_size = int(_decode(size.stdout).strip())
    except ValueError:
        raise FileReadFailure(path, "unreadable", "unexpected size output")
    if blob_size > max_bytes:
        raise FileReadFailure(path, "too_large", f"{blob_size} bytes")

    result = run_git(repo_path, ["cat-file", "blob", f"{commit}:{path}"])
    if result.returncode != 0:
        raise FileReadFailure(path, "unreadable", _decode(result.stderr).strip())
    return result.stdout


def get_recent_log(repo_path: PathLike, n: int, before: Optional[str] = None) -> Optional[str]:
    """
    Returns ``git log --oneline`` for ``n`` commits, optionally starting at ``before``.

    Returns None if git fails, e.g. when ``before`` does not exist.
    """
    args = ["log", "--oneline", "--no-decorate", f"-n{n}"]
    if before:
        args.append(before)
    args.append("--")
    result = run_git(repo_path, args)
    if result.returncode != 0:
        logger.debug(f"git log failed for {before or 'HEAD'}: {_decode(result.stderr).strip()}")
        return None
    return _decode(result.stdout).strip()
