"""Base class and render types for gendoc renderers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from ..errors import RenderError
from ..filters import anchor_filter, nobr_filter, p_filter, para_filter

if TYPE_CHECKING:
    from ..template import Template


class RenderType(Enum):
    """Output formats with a built-in renderer."""

    DOCBOOK = "docbook"
    HTML = "html"
    JSON = "json"
    MARKDOWN = "markdown"


def create_environment(autoescape: bool) -> Environment:
    """Create a Jinja2 environment with the gendoc filters installed.

    Args:
        autoescape: Whether variable output is HTML/XML escaped.

    Returns:
        Environment loading the bundled templates from ``gendoc/resources``.
    """
    env = Environment(
        loader=PackageLoader("gendoc", "resources"),
        undefined=StrictUndefined,
        autoescape=autoescape,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters.update(
        p=p_filter,
        para=para_filter,
        nobr=nobr_filter,
        anchor=anchor_filter,
    )
    return env


class Renderer(ABC):
    """Abstract base class for renderers.

    Every renderer must define class attributes:
        render_type: The RenderType it produces.
        autoescape: Whether templates rendered for this type escape
                    variable output (default False).

    And implement:
        render(): Renders a template model with the built-in layout.

    Custom user templates are compiled with the same environment, so a
    user template selected for an HTML document gets HTML escaping and the
    text filters (``p``, ``para``, ``nobr``, ``anchor``).
    """

    render_type: RenderType
    autoescape: bool = False

    def environment(self) -> Environment:
        return create_environment(self.autoescape)

    @abstractmethod
    def render(self, template: Template) -> str:
        """Render the template model with the built-in layout."""
        ...

    def render_custom(self, template: Template, source: str) -> str:
        """Render the template model with a user supplied Jinja2 template.

        Raises:
            RenderError: If the template is malformed or references
                an unknown field.
        """
        try:
            compiled = self.environment().from_string(source)
            return compiled.render(**template.context())
        except TemplateError as e:
            raise RenderError(
                f"Failed to render custom {self.render_type.value} template: {e}"
            ) from e


class TemplateRenderer(Renderer):
    """Renderer backed by a template bundled in ``gendoc/resources``."""

    template_name: str

    def render(self, template: Template) -> str:
        try:
            compiled = self.environment().get_template(self.template_name)
            return compiled.render(**template.context())
        except TemplateError as e:
            raise RenderError(
                f"Failed to render {self.render_type.value} template "
                f"{self.template_name}: {e}"
            ) from e
