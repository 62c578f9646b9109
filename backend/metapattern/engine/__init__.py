"""Metadata extraction, parameter mapping and pattern rendering engine."""

from metapattern.engine.extractor import MetadataExtractor, UploadedImage
from metapattern.engine.mapper import map_metadata
from metapattern.engine.params import ParameterStore, PatternType, RenderParameters, ShapeKind
from metapattern.engine.renderer import PatternRenderer
from metapattern.engine.session import PatternSession

__all__ = [
    "MetadataExtractor",
    "UploadedImage",
    "map_metadata",
    "ParameterStore",
    "PatternType",
    "RenderParameters",
    "ShapeKind",
    "PatternRenderer",
    "PatternSession",
]
