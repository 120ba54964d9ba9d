"""Binding annotation parsing and handler dispatch."""

from .handlers import (
    AttributeHandler,
    BindingAnnotation,
    Handler,
    MapHandler,
    ResourceHandler,
    SliceOfMapsHandler,
    SliceOfStringsHandler,
    new_handler,
    parse_annotation_name,
    parse_annotation_value,
)
from .path import get_path, nest, parse_path

__all__ = [
    "AttributeHandler",
    "BindingAnnotation",
    "Handler",
    "MapHandler",
    "ResourceHandler",
    "SliceOfMapsHandler",
    "SliceOfStringsHandler",
    "new_handler",
    "parse_annotation_name",
    "parse_annotation_value",
    "get_path",
    "nest",
    "parse_path",
]
