"""issue-creator - create recurring GitHub issues and discussions from templates."""

__version__ = "0.1.0"
