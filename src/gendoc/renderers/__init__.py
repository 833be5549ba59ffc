"""Renderers for gendoc.

A renderer turns the template model of one descriptor group into a
document. Built-in renderers are selected by RenderType; a user template
is rendered with the environment of the selected type.
"""

from .base import Renderer, RenderType, create_environment
from .builtin import (
    BUILTIN_RENDERERS,
    DocBookRenderer,
    HtmlRenderer,
    JsonRenderer,
    MarkdownRenderer,
)
from .registry import infer_render_type, render_template, resolve_renderer

__all__ = [
    "Renderer",
    "RenderType",
    "create_environment",
    "BUILTIN_RENDERERS",
    "DocBookRenderer",
    "HtmlRenderer",
    "JsonRenderer",
    "MarkdownRenderer",
    "infer_render_type",
    "render_template",
    "resolve_renderer",
]
