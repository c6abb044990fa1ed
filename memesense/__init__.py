"""MemeSense - content-safety classification of images through a remote Space."""

__version__ = "0.1.0"
