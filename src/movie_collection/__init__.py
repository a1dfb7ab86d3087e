"""Personal media library: catalog, ordered queue and transcode pipeline."""

__version__ = "0.1.0"
