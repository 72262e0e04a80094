"""shopdesk package entry.

Provides a stable module entrypoint (python -m shopdesk) next to the
top-level packages (app/, screens/, services/, etc.).
"""

from shopdesk.version import __version__

__all__ = ["__version__"]
