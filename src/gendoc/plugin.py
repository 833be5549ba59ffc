"""protoc plugin pipeline for gendoc.

Parses the plugin options, drops excluded files, groups the rest by output
directory and renders one document per group into the
CodeGeneratorResponse.
"""

from __future__ import annotations

import logging
import posixpath
import re
from pathlib import Path
from typing import Iterable, Sequence

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

from .errors import TemplateReadError
from .options import options_from_request
from .renderers import render_template
from .template import Template

logger = logging.getLogger(__name__)

FileDescriptorProto = descriptor_pb2.FileDescriptorProto

# Advertised to protoc on every response
SUPPORTED_FEATURES = plugin_pb2.CodeGeneratorResponse.FEATURE_SUPPORTS_EDITIONS
MINIMUM_EDITION = 900  # EDITION_LEGACY
MAXIMUM_EDITION = 1001  # EDITION_2024

# Group key used when output is not split by source directory
ROOT_DIRECTORY = "./"


def files_to_generate(
    request: plugin_pb2.CodeGeneratorRequest,
) -> list[FileDescriptorProto]:
    """Return the descriptors protoc asked to generate.

    Descriptors follow the order of ``file_to_generate``, which is the order
    the files were given on the protoc command line.
    """
    by_name = {fd.name: fd for fd in request.proto_file}

    fds = []
    for name in request.file_to_generate:
        fd = by_name.get(name)
        if fd is None:
            logger.warning("File to generate not found in request: %s", name)
            continue
        fds.append(fd)
    return fds


def exclude_unwanted_protos(
    fds: Iterable[FileDescriptorProto], exclude_patterns: Sequence[re.Pattern]
) -> list[FileDescriptorProto]:
    """Drop every descriptor whose file name matches an exclude pattern.

    Args:
        fds: Descriptors in request order.
        exclude_patterns: Compiled patterns, matched anywhere in the name.

    Returns:
        Remaining descriptors, in their original order.
    """
    patterns = tuple(exclude_patterns)
    descs = []
    for fd in fds:
        if any(p.search(fd.name) for p in patterns):
            logger.debug("Excluding %s", fd.name)
            continue
        descs.append(fd)
    return descs


def group_protos_by_directory(
    fds: Iterable[FileDescriptorProto], source_relative: bool
) -> dict[str, list[FileDescriptorProto]]:
    """Group descriptors by the directory their document is written to.

    Without ``source_relative`` every descriptor lands in one group keyed by
    ROOT_DIRECTORY. With it, each descriptor is keyed by the directory of
    its own file name (``foo/bar/`` for ``foo/bar/baz.proto``), and files at
    the top level fall back to ROOT_DIRECTORY.
    """
    groups: dict[str, list[FileDescriptorProto]] = {}
    for fd in fds:
        directory = ""
        if source_relative:
            directory, _ = posixpath.split(fd.name)
            if directory:
                directory = directory.rstrip("/") + "/"
        if not directory:
            directory = ROOT_DIRECTORY
        groups.setdefault(directory, []).append(fd)
    return groups


def read_template_file(path: str) -> str:
    """Read a user template.

    Raises:
        TemplateReadError: If the file cannot be read.
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateReadError(f"Cannot read template file {path}: {e}") from e


def generate(
    request: plugin_pb2.CodeGeneratorRequest,
) -> plugin_pb2.CodeGeneratorResponse:
    """Render the documentation for a CodeGeneratorRequest.

    Any failure raises before a response is built; there are no partial
    responses.

    Args:
        request: Request received from protoc.

    Returns:
        Response with one file per output directory.

    Raises:
        GendocError: If options, the template file or rendering fail.
    """
    options = options_from_request(request)

    fds = exclude_unwanted_protos(files_to_generate(request), options.exclude_patterns)

    custom_template = ""
    if options.template_file:
        custom_template = read_template_file(options.template_file)
        logger.debug("Loaded template file %s", options.template_file)

    response = plugin_pb2.CodeGeneratorResponse()
    for directory, group in group_protos_by_directory(fds, options.source_relative).items():
        template = Template.from_descriptors(group, options, all_files=request.proto_file)
        output = render_template(options.type, template, custom_template)

        name = posixpath.normpath(posixpath.join(directory, options.output_file))
        response.file.add(name=name, content=output.decode("utf-8"))
        logger.debug("Generated %s from %d file(s)", name, len(group))

    response.supported_features = SUPPORTED_FEATURES
    response.minimum_edition = MINIMUM_EDITION
    response.maximum_edition = MAXIMUM_EDITION
    return response


def run(data: bytes) -> bytes:
    """Run the plugin on a serialized request and return the serialized response."""
    request = plugin_pb2.CodeGeneratorRequest()
    if data:
        request.ParseFromString(data)
    return generate(request).SerializeToString()
