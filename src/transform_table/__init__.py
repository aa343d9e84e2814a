"""Serve JSON Flask routes as HTML tables via a ``.html`` suffix."""

from transform_table.config import Config, ConfigError
from transform_table.converter import build_table, to_table
from transform_table.extension import TransformTable
from transform_table.middleware import NegotiationState, PathRewriter
from transform_table.options import RenderOptions, resolve_options, route_settings
from transform_table.renderer import Renderer

__all__ = [
    "Config",
    "ConfigError",
    "NegotiationState",
    "PathRewriter",
    "RenderOptions",
    "Renderer",
    "TransformTable",
    "build_table",
    "resolve_options",
    "route_settings",
    "to_table",
]
