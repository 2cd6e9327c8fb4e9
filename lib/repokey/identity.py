"""Identity names derived from repository paths."""

KEY_FILE_PREFIX = 'git_ssh_key_'
KEY_ENV_PREFIX = 'GIT_SSH_KEY_'


def identity_name(repo_path: str) -> str:
    """Normalize a repo path into an identity name.

    Leading slashes are dropped and the remaining ones become underscores,
    so '/org/repo.git' and 'org/repo.git' both map to 'org_repo.git'.
    """
    return repo_path.lstrip('/').replace('/', '_')


def key_file_name(identity: str) -> str:
    """Filename of the per-repo key override (case preserved)."""
    return f'{KEY_FILE_PREFIX}{identity}'


def key_env_name(identity: str) -> str:
    """Environment variable holding the per-repo key or a path to it."""
    return f'{KEY_ENV_PREFIX}{identity.upper()}'
