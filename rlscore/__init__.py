"""Building blocks of a language server for Cargo projects and a command line front end."""

__version__ = "0.1.0"

__all__ = [
    "cmd",
    "commands",
    "deglob",
    "progress",
    "run",
    "work_pool",
    "workspace",
]