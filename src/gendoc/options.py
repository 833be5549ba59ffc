"""Plugin option parsing for gendoc.

protoc hands every plugin a single parameter string (``--doc_opt``). Its
format is::

    <TYPE|TEMPLATE_FILE>,<OUTPUT_FILE>[,default|source_relative][:<OPTION>,<OPTION>*]

where each OPTION is ``key=value`` or, directly after ``exclude_patterns=``,
a bare additional pattern.
"""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

from .errors import OptionsError, PatternError
from .renderers.base import RenderType
from .renderers.registry import infer_render_type

if TYPE_CHECKING:
    from google.protobuf.compiler import plugin_pb2

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FILE = "index.html"
DEFAULT_EXCLUDE_DIRECTIVE = "@exclude"
DEFAULT_EXCLUDE_LINE_DIRECTIVE = "@exclude-line"


@dataclass(frozen=True)
class PluginOptions:
    """Options for one plugin invocation.

    Instances are immutable; parse_options returns a fully built one.
    """

    type: RenderType = RenderType.HTML
    template_file: str = ""
    output_file: str = DEFAULT_OUTPUT_FILE
    exclude_patterns: tuple[re.Pattern, ...] = ()
    source_relative: bool = False
    camel_case_fields: bool = False
    # Directives for block exclusion; parsing only appends to the defaults
    exclude_directives: tuple[str, ...] = (DEFAULT_EXCLUDE_DIRECTIVE,)
    # Directives for line exclusion; parsing only appends to the defaults
    exclude_line_directives: tuple[str, ...] = (DEFAULT_EXCLUDE_LINE_DIRECTIVE,)

    def validate(self) -> None:
        """Validate options.

        Raises:
            OptionsError: If options are invalid.
        """
        if not self.output_file or self.output_file in (".", "/"):
            raise OptionsError(f"Invalid output file: {self.output_file!r}")
        if "" in self.exclude_directives or "" in self.exclude_line_directives:
            raise OptionsError("Exclude directives cannot be empty")


class _State(Enum):
    """Which option a bare token continues."""

    NONE = "none"
    EXCLUDE_PATTERNS = "exclude_patterns"
    OTHER = "other"


def _compile_pattern(value: str) -> re.Pattern:
    try:
        return re.compile(value)
    except re.error as e:
        raise PatternError(f"Invalid exclude pattern {value!r}: {e}") from e


@dataclass
class _OptionValues:
    """Values collected from the OPTIONS part of the parameter."""

    camel_case_fields: bool = False
    exclude_patterns: list[re.Pattern] = field(default_factory=list)
    exclude_directives: list[str] = field(
        default_factory=lambda: [DEFAULT_EXCLUDE_DIRECTIVE]
    )
    exclude_line_directives: list[str] = field(
        default_factory=lambda: [DEFAULT_EXCLUDE_LINE_DIRECTIVE]
    )


def _parse_option_list(options: _OptionValues, option_list: str) -> None:
    state = _State.NONE
    for token in option_list.split(","):
        token = token.strip()
        if not token:
            continue

        if "=" in token:
            key, value = token.split("=", 1)
            state = _State.EXCLUDE_PATTERNS if key == "exclude_patterns" else _State.OTHER

            if key == "camel_case_fields":
                if value == "true":
                    options.camel_case_fields = True
                elif value == "false":
                    options.camel_case_fields = False
                else:
                    raise OptionsError(f"Invalid camel_case_fields value: {value}")
            elif key == "exclude_patterns":
                if value:
                    options.exclude_patterns.append(_compile_pattern(value))
            elif key == "exclude_directive":
                if value:
                    options.exclude_directives.append(value)
            elif key == "exclude_line_directive":
                if value:
                    options.exclude_line_directives.append(value)
            else:
                raise OptionsError(f"Invalid option: {key}")
            continue

        if state is _State.EXCLUDE_PATTERNS:
            options.exclude_patterns.append(_compile_pattern(token))
            continue

        raise OptionsError(f"Invalid option: {token}")


def parse_options(parameter: str) -> PluginOptions:
    """Parse the plugin parameter string.

    Only the first line of the parameter is used. Options after the first
    ``:`` are applied before the file parameters are read, so they take
    effect even when the file parameters are empty.

    Args:
        parameter: Raw parameter from the CodeGeneratorRequest.

    Returns:
        Parsed options.

    Raises:
        OptionsError: If the parameter is malformed. The first invalid
            token is reported.
        PatternError: If an exclude pattern does not compile.
    """
    values = _OptionValues()

    params = parameter.split("\n", 1)[0]
    file_params, colon, option_list = params.partition(":")
    if colon:
        _parse_option_list(values, option_list)

    options = PluginOptions(
        camel_case_fields=values.camel_case_fields,
        exclude_patterns=tuple(values.exclude_patterns),
        exclude_directives=tuple(values.exclude_directives),
        exclude_line_directives=tuple(values.exclude_line_directives),
    )

    if not file_params:
        logger.debug("No file parameters, using %s defaults", options.type.value)
        return options

    if "," not in file_params:
        raise OptionsError(f"Invalid parameter: {file_params}")

    parts = file_params.split(",")
    if len(parts) > 3:
        raise OptionsError(f"Invalid parameter: {file_params}")
    if len(parts) == 3 and parts[2] not in ("source_relative", "default"):
        raise OptionsError(f"Invalid parameter: {file_params}")

    template_file = parts[0]
    render_type = infer_render_type(template_file)
    if render_type is not None:
        template_file = ""

    options = replace(
        options,
        type=render_type or RenderType.HTML,
        template_file=template_file,
        output_file=posixpath.basename(parts[1].rstrip("/")),
        source_relative=len(parts) == 3 and parts[2] == "source_relative",
    )
    options.validate()
    logger.debug(
        "Parsed options: type=%s template=%r output=%r source_relative=%s",
        options.type.value,
        options.template_file,
        options.output_file,
        options.source_relative,
    )
    return options


def options_from_request(request: plugin_pb2.CodeGeneratorRequest) -> PluginOptions:
    """Parse the options carried by a CodeGeneratorRequest."""
    return parse_options(request.parameter)
