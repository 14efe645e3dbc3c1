__version__ = "0.1.0"

__all__ = [
    "__version__",
    "IOContext",
    "SessionResult",
    "compose_input",
    "restore",
    "run",
    "run_session",
]

from .script import compose_input
from .session import IOContext, SessionResult, restore, run, run_session
