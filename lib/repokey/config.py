"""Parse the per-user repokey configuration."""

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

import yaml

from repokey.errors import ConfigError
from repokey.resolver import SOURCES

CONFIG_FILE = 'config.yml'
KNOWN_FIELDS = {'ssh_command', 'sources', 'quiet', 'check_key_permissions'}
TRUTHY = {'1', 'true', 'yes', 'on'}


def config_path(environ: Mapping[str, str]) -> Path:
    """Location of the user config file.

    $REPOKEY_CONFIG if set, otherwise $XDG_CONFIG_HOME/repokey/config.yml
    with ~/.config standing in for an unset XDG_CONFIG_HOME.
    """
    if environ.get('REPOKEY_CONFIG'):
        return Path(environ['REPOKEY_CONFIG']).expanduser()
    base = environ.get('XDG_CONFIG_HOME') or Path.home() / '.config'
    return Path(base) / 'repokey' / CONFIG_FILE


@dataclass
class RepokeyConfig:
    """Settings from the user config file, with environment overrides applied."""
    ssh_command: str = 'ssh'
    sources: List[str] = field(default_factory=lambda: list(SOURCES))
    quiet: bool = False
    check_key_permissions: bool = True

    @classmethod
    def load(cls, environ: Optional[Mapping[str, str]] = None) -> 'RepokeyConfig':
        """Load the user's config for an invocation.

        Reads $REPOKEY_CONFIG if set, otherwise the per-user file from
        `config_path`. The working directory is never consulted: it is usually
        a checkout whose contents the user does not control. A missing file
        yields the defaults. REPOKEY_SSH and REPOKEY_QUIET override the file.

        Raises:
            ConfigError: On unreadable YAML, unknown fields or bad values
        """
        environ = os.environ if environ is None else environ
        config_file = config_path(environ)

        data = {}
        if config_file.exists():
            try:
                with open(config_file, encoding='utf-8') as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Cannot read {config_file}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"{config_file} must contain a mapping")

        unknown = set(data.keys()) - KNOWN_FIELDS
        if unknown:
            raise ConfigError(f"Unknown field(s) in {config_file}: {', '.join(sorted(unknown))}")

        config = cls(**data)
        if environ.get('REPOKEY_SSH'):
            config.ssh_command = environ['REPOKEY_SSH']
        if environ.get('REPOKEY_QUIET'):
            config.quiet = environ['REPOKEY_QUIET'].lower() in TRUTHY
        config.validate()
        return config

    def validate(self) -> None:
        if not isinstance(self.ssh_command, str):
            raise ConfigError("ssh_command must be a string")
        try:
            if not shlex.split(self.ssh_command):
                raise ConfigError("ssh_command must not be empty")
        except ValueError as e:
            raise ConfigError(f"Cannot parse ssh_command {self.ssh_command!r}: {e}") from e

        if isinstance(self.sources, str):
            self.sources = [self.sources]
        if not isinstance(self.sources, list) or not self.sources:
            raise ConfigError("sources must be a non-empty list")
        unknown = [s for s in self.sources if s not in SOURCES]
        if unknown:
            raise ConfigError(
                f"Unknown key source(s): {', '.join(map(str, unknown))} "
                f"(expected {' or '.join(SOURCES)})"
            )

        for name in ('quiet', 'check_key_permissions'):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be true or false")
