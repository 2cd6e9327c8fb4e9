#!/usr/bin/env python3
"""repokey CLI - per-repository SSH keys for git.

Use as git's ssh command:

    GIT_SSH_COMMAND=repokey git clone git@github.com:org/repo.git

The key for org/repo.git is taken from ./git_ssh_key_org_repo.git or from
$GIT_SSH_KEY_ORG_REPO.GIT, then ssh runs with `-i <key>` prepended.
"""

import sys
from typing import Sequence

import click

from repokey.config import RepokeyConfig
from repokey.errors import RepokeyError, UsageError
from repokey.events import EventLog
from repokey.identity import identity_name
from repokey.launcher import augment_ssh_args, run_ssh
from repokey.remote_command import parse_repo_path
from repokey.resolver import KeyResolver

USAGE = 'Usage: GIT_SSH_COMMAND=repokey git clone ...'


def run_with_key(ssh_args: Sequence[str], config: RepokeyConfig, events: EventLog) -> int:
    """Resolve the repo key, run ssh with it, and return ssh's exit code.

    A temporary key file written for this call is removed before returning,
    whether ssh succeeds, fails, or never starts.
    """
    if not ssh_args:
        raise UsageError(USAGE)
    events.log_event(f'ssh params: {list(ssh_args)!r}')

    repo_path = parse_repo_path(ssh_args[-1])
    events.log_event(f'repo path is {repo_path!r}')
    identity = identity_name(repo_path)

    resolver = KeyResolver(
        sources=config.sources,
        check_permissions=config.check_key_permissions,
        events=events,
    )
    with resolver.resolve(identity) as key:
        final_args = augment_ssh_args(ssh_args, key.path)
        if key.found:
            events.log_event(f'new ssh params: {final_args!r}')
        return run_ssh(final_args, config.ssh_command)


class PassthroughCommand(click.Command):
    """Command whose arguments all belong to ssh.

    Nothing is parsed as an option of ours, not even `--help` or `--`.
    """

    def parse_args(self, ctx, args):
        ctx.params['ssh_args'] = tuple(args)
        ctx.args = []
        return []


@click.command(cls=PassthroughCommand)
def main(ssh_args):
    """Run ssh with the key configured for the repository being accessed."""
    if not ssh_args:
        click.echo(USAGE, err=True)
        sys.exit(UsageError.exit_code)

    events = EventLog()
    try:
        config = RepokeyConfig.load()
        events.quiet = config.quiet
        exit_code = run_with_key(ssh_args, config, events)
    except RepokeyError as e:
        events.error(str(e))
        sys.exit(e.exit_code)

    if exit_code != 0:
        events.log_event(f'ssh exited with status {exit_code}')
    sys.exit(exit_code)


if __name__ == '__main__':
    main()
