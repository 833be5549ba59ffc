"""gendoc - Documentation generator plugin for protoc."""

__version__ = "1.0.0"

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .errors import (
    GendocError,
    OptionsError,
    PatternError,
    RenderError,
    TemplateReadError,
)
from .filters import anchor_filter, nobr_filter, p_filter, para_filter
from .options import PluginOptions, parse_options
from .plugin import (
    exclude_unwanted_protos,
    generate,
    group_protos_by_directory,
    run,
)
from .renderers import RenderType

__all__ = [
    "GendocError",
    "OptionsError",
    "PatternError",
    "RenderError",
    "TemplateReadError",
    "PluginOptions",
    "RenderType",
    "parse_options",
    "exclude_unwanted_protos",
    "group_protos_by_directory",
    "generate",
    "run",
    "p_filter",
    "para_filter",
    "nobr_filter",
    "anchor_filter",
    "__version__",
]
