"""Terminal menu for picking and playing lofi streams."""

__version__ = "0.1.0"
__commit__ = "none"
__build_date__ = "unknown"

__all__ = ["__version__", "__commit__", "__build_date__"]
