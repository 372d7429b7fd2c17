"""watchlink core package.

watchlink publishes newly available Trakt watchlist items from Radarr and
Sonarr into an output folder as directory symlinks, recording every published
item in an append-only history ledger so it is handled at most once.

- **orchestrator**: Runs fetch, match, publish and notify for one pass
- **matcher**: Parses upstream responses and joins watchlist against library
- **remap**: Container path to host path substitution
- **publisher**: Symlink creation with per-match failure isolation
- **persistence**: The history ledger
- **config**: Immutable configuration from environment variables and YAML
- **notifications**: Slack and generic webhook run summaries

The main entry point is the ``Orchestrator`` class; ``watchlink.cli`` wraps it
for the command line.
"""

from .orchestrator import Orchestrator
from .version import __version__

__all__ = [
    "__version__",
    "Orchestrator",
]
