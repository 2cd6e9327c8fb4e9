"""Run the real ssh client."""

import shlex
import subprocess
from typing import List, Optional, Sequence

from repokey.errors import SubprocessError

IDENTITY_FLAG = '-i'


def augment_ssh_args(ssh_args: Sequence[str], key_path: Optional[str]) -> List[str]:
    """Prepend `-i <key_path>` to the ssh arguments when a key was resolved."""
    if not key_path:
        return list(ssh_args)
    return [IDENTITY_FLAG, key_path, *ssh_args]


def run_ssh(ssh_args: Sequence[str], ssh_command: str = 'ssh') -> int:
    """Run ssh with our own stdin/stdout/stderr and wait for it.

    Args:
        ssh_args: Arguments for the client, already augmented
        ssh_command: Client command line, e.g. 'ssh' or 'ssh -F ~/.ssh/git_config'

    Returns:
        The client's exit code (128 + N if it was killed by signal N)

    Raises:
        SubprocessError: If the client could not be started
    """
    client = shlex.split(ssh_command)
    if not client:
        raise SubprocessError("no ssh command configured")
    try:
        result = subprocess.run(client + list(ssh_args), check=False)
    except OSError as e:
        raise SubprocessError(f"error running {client[0]}: {e}") from e

    if result.returncode < 0:
        return 128 - result.returncode
    return result.returncode
