"""ESPN fantasy football waiver-wire rankings, exports and AI recommendations."""

__version__ = "0.1.0"
