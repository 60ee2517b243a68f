"""mdsnap - render clipboard Markdown to cropped PNG images."""

__version__ = "0.1.0"
