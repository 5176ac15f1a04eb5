"""Share files with peers on the local network."""

__version__ = "0.1.0"