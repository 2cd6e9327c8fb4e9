"""Error types raised by repokey.

Library code raises these; only the CLI turns them into exit codes.
"""


class RepokeyError(Exception):
    """Base class for all repokey failures."""

    exit_code = 1


class UsageError(RepokeyError):
    """No ssh arguments were supplied."""

    exit_code = 1


class ConfigError(RepokeyError):
    """The user config file could not be read or contains invalid settings."""

    exit_code = 2


class RemoteCommandError(RepokeyError):
    """The trailing remote command could not be turned into a repo path."""

    exit_code = 2


class ParseError(RemoteCommandError):
    """Unterminated quoting or a dangling escape in the remote command."""


class MalformedCommandError(RemoteCommandError):
    """The remote command has no path argument."""


class KeyMaterializationError(RepokeyError):
    """Key material from the environment could not be written privately."""

    exit_code = 2


class SubprocessError(RepokeyError):
    """The ssh client could not be started."""

    exit_code = 1
