"""restodesk: workflow core for restaurant operations dashboards."""

__version__ = "0.1.0"
