"""Resolve the SSH key override for a repository identity."""

import os
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional

from repokey.errors import KeyMaterializationError
from repokey.events import EventLog
from repokey.identity import key_env_name, key_file_name

SOURCES = ('file', 'env')
TEMP_PREFIX = 'repokey-'
KEY_FILE_MODE = 0o600


@dataclass
class ResolvedKey:
    """Outcome of a key lookup.

    When `owned` is set the file at `path` was written by this invocation and
    is deleted when the key is released. Use it as a context manager so the
    release happens on every exit path:

        with resolver.resolve(identity) as key:
            exit_code = run_ssh(augment_ssh_args(args, key.path))
    """

    path: Optional[str] = None
    source: str = 'none'
    owned: bool = False

    @property
    def found(self) -> bool:
        return self.path is not None

    def release(self) -> None:
        """Remove an owned key file. Safe to call more than once."""
        if not self.owned or self.path is None:
            return
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        self.owned = False

    def __enter__(self) -> 'ResolvedKey':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def materialize_key(material: str, temp_dir: Optional[Path] = None) -> str:
    """Write literal key material to a private temporary file.

    Args:
        material: Key contents, written byte for byte
        temp_dir: Directory for the file (system temp dir if None)

    Returns:
        Path of the new file, mode 0600

    Raises:
        KeyMaterializationError: If any step fails. A partial file is removed.
    """
    try:
        fd, path = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=temp_dir)
    except OSError as e:
        raise KeyMaterializationError(f"error creating temp file: {e}") from e

    step = 'writing key to'
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(os.fsencode(material))
        step = "chmod'ing"
        os.chmod(path, KEY_FILE_MODE)
    except OSError as e:
        try:
            os.remove(path)
        except OSError:
            pass
        raise KeyMaterializationError(f"error {step} temp file {path}: {e}") from e
    return path


class KeyResolver:
    """Finds a key override for an identity by walking sources in order.

    Sources:
        'file': `git_ssh_key_<identity>` in the working directory
        'env':  `GIT_SSH_KEY_<IDENTITY>`, either a path to a key file or the
                key itself (written to a private temp file)

    The default order ('file', 'env') makes an on-disk override win over the
    environment. A single-source tuple restricts lookup to that source.
    """

    def __init__(self, sources: Iterable[str] = SOURCES,
                 environ: Optional[Mapping[str, str]] = None,
                 cwd: Optional[Path] = None,
                 temp_dir: Optional[Path] = None,
                 check_permissions: bool = True,
                 events: Optional[EventLog] = None):
        self.sources = tuple(sources)
        unknown = [s for s in self.sources if s not in SOURCES]
        if unknown:
            raise ValueError(f"Unknown key source(s): {', '.join(unknown)}")
        self.environ = os.environ if environ is None else environ
        self.cwd = cwd
        self.temp_dir = temp_dir
        self.check_permissions = check_permissions
        self.events = events or EventLog()

    def resolve(self, identity: str) -> ResolvedKey:
        """Return the first key override found for `identity`."""
        for source in self.sources:
            if source == 'file':
                key = self._from_file(identity)
            else:
                key = self._from_env(identity)
            if key is not None:
                return key
        return ResolvedKey()

    def _from_file(self, identity: str) -> Optional[ResolvedKey]:
        try_path = key_file_name(identity)
        path = self._existing_path(try_path)
        if path is None:
            self.events.log_event(f'no key override at path {try_path}')
            return None
        self.events.log_event(f'got key override at path {try_path}')
        return ResolvedKey(path=path, source='file')

    def _from_env(self, identity: str) -> Optional[ResolvedKey]:
        env_name = key_env_name(identity)
        value = self.environ.get(env_name, '')
        if not value:
            self.events.log_event(f'no key override in ENV {env_name}')
            return None
        self.events.log_event(f'got key override from ENV {env_name}')

        path = self._existing_path(value)
        if path is not None:
            self.events.log_event(f'ENV {env_name} points at key file {path}')
            return ResolvedKey(path=path, source='env-path')

        path = materialize_key(value, self.temp_dir)
        self.events.log_event(f'wrote key from ENV {env_name} to {path}')
        return ResolvedKey(path=path, source='env-literal', owned=True)

    def _existing_path(self, try_path: str) -> Optional[str]:
        """Absolute form of `try_path` if it exists, else None."""
        candidate = os.path.join(self.cwd, try_path) if self.cwd else try_path
        # False for literal key material too (NULs, over-long names)
        if not os.path.exists(candidate):
            return None

        try:
            path = os.path.abspath(candidate)
        except OSError as e:
            self.events.warn(f"couldn't make {candidate!r} absolute: {e}")
            path = candidate
        if self.check_permissions:
            self._warn_if_exposed(path)
        return path

    def _warn_if_exposed(self, path: str) -> None:
        try:
            mode = os.stat(path).st_mode
        except OSError:
            return
        if mode & (stat.S_IRWXG | stat.S_IRWXO):
            self.events.warn(
                f'key file {path} is accessible by group/others '
                f'(mode {stat.S_IMODE(mode):04o}); ssh may refuse it'
            )
