"""Text filters available to every gendoc template.

Comments in ``.proto`` files are plain text with hard line breaks. These
filters turn them into markup that survives HTML, Markdown tables and
DocBook. They are pure functions and can be used outside of templates.
"""

import re

from markupsafe import Markup

_PARA_RE = re.compile(r"(?:\n|\r|\r\n)\s*")
_SPACE_RE = re.compile(r"( )+")
_MULTI_NEWLINE_RE = re.compile(r"(?:\r\n|\r|\n){2,}")
_SPECIAL_CHARS_RE = re.compile(r"[^a-zA-Z0-9_-]")


def _split_paragraphs(content: str) -> list[str]:
    return _PARA_RE.split(str(content))


def p_filter(content: str) -> Markup:
    """Split content on new lines and wrap each line in a <p> tag."""
    return Markup("<p>%s</p>" % "</p><p>".join(_split_paragraphs(content)))


def para_filter(content: str) -> Markup:
    """Split content on new lines and wrap each line in a <para> tag (DocBook)."""
    return Markup("<para>%s</para>" % "</para><para>".join(_split_paragraphs(content)))


def nobr_filter(content: str) -> Markup:
    """Replace single line breaks with <br> so content fits in a table cell.

    Paragraphs (two or more consecutive line endings) are kept apart with
    ``<br><br>``. Runs of spaces are collapsed and a single space next to a
    ``<br>`` is trimmed.

    Args:
        content: Raw comment text.

    Returns:
        Markup without any line endings.
    """
    normalized = str(content).replace("\r\n", "\n")
    paragraphs = [
        _SPACE_RE.sub(" ", p).replace("\r", "<br>").replace("\n", "<br>")
        for p in _MULTI_NEWLINE_RE.split(normalized)
    ]
    # Spaces next to paragraph breaks are trimmed as well
    joined = "<br><br>".join(paragraphs)
    return Markup(joined.replace(" <br>", "<br>").replace("<br> ", "<br>"))


def anchor_filter(value: str) -> str:
    """Make a value safe for use as an HTML anchor.

    ``/`` becomes ``_`` and any other character outside ``[A-Za-z0-9_-]``
    becomes ``-``. Distinct values can map to the same anchor
    (``a.b`` and ``a-b``).
    """
    return _SPECIAL_CHARS_RE.sub("-", str(value).replace("/", "_"))
