"""Parse the remote command git hands to ssh."""

import shlex
from typing import List

from repokey.errors import MalformedCommandError, ParseError


def split_remote_command(remote_cmd: str) -> List[str]:
    """Split a remote command into shell words.

    Args:
        remote_cmd: Command string, e.g. "git-upload-pack '/org/repo.git'"

    Returns:
        List of tokens after POSIX quote and escape removal

    Raises:
        ParseError: If quoting is unterminated or an escape dangles
    """
    try:
        return shlex.split(remote_cmd, posix=True)
    except ValueError as e:
        raise ParseError(f"couldn't parse ssh remote cmd {remote_cmd!r}: {e}") from e


def parse_repo_path(remote_cmd: str) -> str:
    """Return the repository path, the last word of the remote command."""
    parts = split_remote_command(remote_cmd)
    if len(parts) < 2:
        raise MalformedCommandError(
            f"don't know how to parse ssh remote cmd {remote_cmd!r} for repo path"
        )
    return parts[-1]
