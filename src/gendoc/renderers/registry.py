"""Render type inference and renderer resolution.

A template argument given to the plugin is either the name of a built-in
output format (``html``, ``markdown``...) or a path to a user template.
Built-in formats are recognised by name first, then by file extension.
"""

from __future__ import annotations

import logging
import posixpath
from typing import TYPE_CHECKING

from .base import Renderer, RenderType
from .builtin import BUILTIN_RENDERERS

if TYPE_CHECKING:
    from ..template import Template

logger = logging.getLogger(__name__)

_NAMES: dict[str, RenderType] = {
    "docbook": RenderType.DOCBOOK,
    "html": RenderType.HTML,
    "json": RenderType.JSON,
    "markdown": RenderType.MARKDOWN,
    "md": RenderType.MARKDOWN,
}

_EXTENSIONS: dict[str, RenderType] = {
    ".docbook": RenderType.DOCBOOK,
    ".htm": RenderType.HTML,
    ".html": RenderType.HTML,
    ".json": RenderType.JSON,
    ".markdown": RenderType.MARKDOWN,
    ".md": RenderType.MARKDOWN,
}


def infer_render_type(name: str) -> RenderType | None:
    """Infer a built-in render type from a type name or template file name.

    Resolution order:
        1. Type name or alias (case-insensitive), e.g. "html", "md"
        2. File extension (case-insensitive), e.g. "docs.md"
        3. None (the name is a path to a user template)

    Args:
        name: First comma-separated part of the plugin parameter.

    Returns:
        Matching RenderType, or None.
    """
    key = name.strip().lower()
    if key in _NAMES:
        return _NAMES[key]

    _root, ext = posixpath.splitext(key)
    return _EXTENSIONS.get(ext)


def resolve_renderer(render_type: RenderType) -> Renderer:
    """Return the built-in renderer for a render type."""
    for renderer in BUILTIN_RENDERERS:
        if renderer.render_type is render_type:
            return renderer
    raise LookupError(f"No renderer registered for {render_type!r}")


def render_template(
    render_type: RenderType, template: Template, input_template: str = ""
) -> bytes:
    """Render a template model to bytes.

    Args:
        render_type: Output format.
        template: Template model for one descriptor group.
        input_template: Contents of a user template. When non-empty it
            replaces the built-in layout of the render type.

    Returns:
        UTF-8 encoded document.

    Raises:
        RenderError: If rendering fails.
    """
    renderer = resolve_renderer(render_type)
    if input_template:
        logger.debug("Rendering custom template as %s", render_type.value)
        output = renderer.render_custom(template, input_template)
    else:
        logger.debug("Rendering built-in %s template", render_type.value)
        output = renderer.render(template)
    return output.encode("utf-8")
