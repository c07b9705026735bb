"""playshelf - a personal local-media streaming library."""

__version__ = "0.1.0"
