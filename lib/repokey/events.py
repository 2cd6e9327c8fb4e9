"""Diagnostic output on stderr.

stdout belongs to the ssh transport, so nothing here ever writes to it.
"""

from typing import IO, Optional

import click

PREFIX = 'repokey'

LEVEL_COLORS = {
    'WARN': 'yellow',
    'ERROR': 'red',
}


class EventLog:
    """Writes `repokey: LEVEL: message` lines to stderr.

    Example:
        events = EventLog(quiet=config.quiet)
        events.log_event('no key override in ENV GIT_SSH_KEY_ORG_REPO')
        events.log_event('key file is group readable', level='WARN')
    """

    def __init__(self, quiet: bool = False, stream: Optional[IO[str]] = None):
        self.quiet = quiet
        self.stream = stream

    def log_event(self, message: str, level: str = 'INFO') -> None:
        """Log an event. INFO lines are dropped when quiet."""
        if self.quiet and level == 'INFO':
            return
        label = f'{level}:'
        color = LEVEL_COLORS.get(level)
        if color:
            label = click.style(label, fg=color, bold=True)
        click.echo(f'{PREFIX}: {label} {message}', file=self.stream, err=True)

    def warn(self, message: str) -> None:
        self.log_event(message, level='WARN')

    def error(self, message: str) -> None:
        self.log_event(message, level='ERROR')
