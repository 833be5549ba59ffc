"""Built-in renderers for gendoc.

HTML, Markdown and DocBook documents come from Jinja2 templates bundled in
``gendoc/resources``. JSON is a direct dump of the template model.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from .base import Renderer, RenderType, TemplateRenderer

if TYPE_CHECKING:
    from ..template import Template


class HtmlRenderer(TemplateRenderer):
    """Single page HTML document with a table of contents."""

    render_type = RenderType.HTML
    autoescape = True
    template_name = "html.jinja"


class MarkdownRenderer(TemplateRenderer):
    """Markdown document using tables for fields and values."""

    render_type = RenderType.MARKDOWN
    template_name = "markdown.jinja"


class DocBookRenderer(TemplateRenderer):
    """DocBook 5 article."""

    render_type = RenderType.DOCBOOK
    autoescape = True
    template_name = "docbook.jinja"


class JsonRenderer(Renderer):
    """JSON dump of the template model with camelCase keys."""

    render_type = RenderType.JSON

    def render(self, template: Template) -> str:
        return json.dumps(template.to_dict(), indent=2, ensure_ascii=False) + "\n"


BUILTIN_RENDERERS: tuple[Renderer, ...] = (
    DocBookRenderer(),
    HtmlRenderer(),
    JsonRenderer(),
    MarkdownRenderer(),
)
