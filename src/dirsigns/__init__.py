"""Git status signs for directory listing buffers."""

from .controller import StatusController
from .fan_in import FanInError, run_concurrently
from .git_status import StatusEntry, StatusMap, parse_git_status
from .loader import fetch_git_status, load_git_status
from .markers import add_status_markers

__version__ = "0.1.0"
__all__ = [
    "FanInError",
    "StatusController",
    "StatusEntry",
    "StatusMap",
    "__version__",
    "add_status_markers",
    "fetch_git_status",
    "load_git_status",
    "parse_git_status",
    "run_concurrently",
]
