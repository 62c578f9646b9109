"""metapattern: photo metadata to generative pattern engine."""

__version__ = "0.1.0"
