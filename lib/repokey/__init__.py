"""repokey - pick an SSH key per repository for git's ssh transport."""

__version__ = '0.1.0'
