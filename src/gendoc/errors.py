"""Exceptions raised by gendoc."""


class GendocError(Exception):
    """Base exception for gendoc errors."""

    pass


class OptionsError(GendocError):
    """The plugin parameter string could not be parsed."""

    pass


class PatternError(OptionsError):
    """An exclude pattern is not a valid regular expression."""

    pass


class TemplateReadError(GendocError):
    """A user supplied template file could not be read."""

    pass


class RenderError(GendocError):
    """A renderer failed to produce output."""

    pass
