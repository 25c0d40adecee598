"""Extension layer: lifecycle hooks via pluggy.

INVARIANT: Plugin failures are warnings, never errors.
"""

import pluggy

from restodesk.plugins.manager import PluginManager

hookimpl = pluggy.HookimplMarker("restodesk")

__all__ = ["PluginManager", "hookimpl"]
