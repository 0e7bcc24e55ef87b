"""Cached BOM radar and satellite imagery, composited into timelapse gifs."""

__version__ = "0.1.0"
