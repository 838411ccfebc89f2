"""People Finder - debounced, cancellable people list fetching."""

__version__ = "0.1.0"
