"""Template model for gendoc.

Turns the file descriptors of one output group into plain dataclasses that
every renderer (built-in or user template) receives. Descriptions are taken
from the ``source_code_info`` comments attached by protoc, with exclusion
directives applied.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, is_dataclass
from typing import TYPE_CHECKING, Any, Iterable, Sequence

from google.protobuf import descriptor_pb2

if TYPE_CHECKING:
    from .options import PluginOptions

FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto

# Field numbers used in SourceCodeInfo.Location.path
_FILE_PACKAGE = 2
_FILE_MESSAGE_TYPE = 4
_FILE_ENUM_TYPE = 5
_FILE_SERVICE = 6
_FILE_EXTENSION = 7
_FILE_SYNTAX = 12
_FILE_EDITION = 14
_MESSAGE_FIELD = 2
_MESSAGE_NESTED_TYPE = 3
_MESSAGE_ENUM_TYPE = 4
_MESSAGE_EXTENSION = 6
_ENUM_VALUE = 2
_SERVICE_METHOD = 2

_PARAGRAPH_SEP_RE = re.compile(r"\n[ \t]*\n")

_NAMED_TYPES = (
    FieldDescriptorProto.TYPE_MESSAGE,
    FieldDescriptorProto.TYPE_ENUM,
    FieldDescriptorProto.TYPE_GROUP,
)


@dataclass
class ScalarValue:
    """A protobuf scalar type and its equivalent in generated code."""

    proto_type: str
    notes: str
    cpp_type: str
    cs_type: str
    go_type: str
    java_type: str
    php_type: str
    python_type: str
    ruby_type: str


SCALAR_VALUE_TYPES: tuple[ScalarValue, ...] = (
    ScalarValue("double", "", "double", "double", "float64", "double", "float", "float", "Float"),
    ScalarValue("float", "", "float", "float", "float32", "float", "float", "float", "Float"),
    ScalarValue(
        "int32",
        "Uses variable-length encoding. Inefficient for encoding negative numbers "
        "– if your field is likely to have negative values, use sint32 instead.",
        "int32", "int", "int32", "int", "integer", "int", "Bignum or Fixnum (as required)",
    ),
    ScalarValue(
        "int64",
        "Uses variable-length encoding. Inefficient for encoding negative numbers "
        "– if your field is likely to have negative values, use sint64 instead.",
        "int64", "long", "int64", "long", "integer/string", "int/long", "Bignum",
    ),
    ScalarValue(
        "uint32", "Uses variable-length encoding.",
        "uint32", "uint", "uint32", "int", "integer", "int/long", "Bignum or Fixnum (as required)",
    ),
    ScalarValue(
        "uint64", "Uses variable-length encoding.",
        "uint64", "ulong", "uint64", "long", "integer/string", "int/long", "Bignum or Fixnum (as required)",
    ),
    ScalarValue(
        "sint32",
        "Uses variable-length encoding. Signed int value. These more efficiently "
        "encode negative numbers than regular int32s.",
        "int32", "int", "int32", "int", "integer", "int", "Bignum or Fixnum (as required)",
    ),
    ScalarValue(
        "sint64",
        "Uses variable-length encoding. Signed int value. These more efficiently "
        "encode negative numbers than regular int64s.",
        "int64", "long", "int64", "long", "integer/string", "int/long", "Bignum",
    ),
    ScalarValue(
        "fixed32",
        "Always four bytes. More efficient than uint32 if values are often greater than 2^28.",
        "uint32", "uint", "uint32", "int", "integer", "int", "Bignum or Fixnum (as required)",
    ),
    ScalarValue(
        "fixed64",
        "Always eight bytes. More efficient than uint64 if values are often greater than 2^56.",
        "uint64", "ulong", "uint64", "long", "integer/string", "int/long", "Bignum",
    ),
    ScalarValue(
        "sfixed32", "Always four bytes.",
        "int32", "int", "int32", "int", "integer", "int", "Bignum or Fixnum (as required)",
    ),
    ScalarValue(
        "sfixed64", "Always eight bytes.",
        "int64", "long", "int64", "long", "integer/string", "int/long", "Bignum",
    ),
    ScalarValue("bool", "", "bool", "bool", "bool", "boolean", "boolean", "boolean", "TrueClass/FalseClass"),
    ScalarValue(
        "string", "A string must always contain UTF-8 encoded or 7-bit ASCII text.",
        "string", "string", "string", "String", "string", "str/unicode", "String (UTF-8)",
    ),
    ScalarValue(
        "bytes", "May contain any arbitrary sequence of bytes.",
        "string", "ByteString", "[]byte", "ByteString", "string", "str", "String (ASCII-8BIT)",
    ),
)


@dataclass
class EnumValue:
    name: str
    number: int
    description: str


@dataclass
class Enum:
    name: str
    long_name: str
    full_name: str
    description: str
    values: list[EnumValue] = field(default_factory=list)


@dataclass
class MessageField:
    name: str
    description: str
    label: str
    type: str
    long_type: str
    full_type: str
    ismap: bool = False
    isoneof: bool = False
    oneofdecl: str = ""
    default_value: str = ""


@dataclass
class FileExtension:
    """An extension field, declared at file level or inside a message."""

    name: str
    long_name: str
    full_name: str
    description: str
    label: str
    type: str
    long_type: str
    full_type: str
    number: int
    default_value: str
    containing_type: str
    containing_long_type: str
    containing_full_type: str


@dataclass
class Message:
    name: str
    long_name: str
    full_name: str
    description: str
    fields: list[MessageField] = field(default_factory=list)
    extensions: list[FileExtension] = field(default_factory=list)

    @property
    def has_fields(self) -> bool:
        return bool(self.fields)

    @property
    def has_extensions(self) -> bool:
        return bool(self.extensions)

    @property
    def has_oneofs(self) -> bool:
        return any(f.isoneof for f in self.fields)


@dataclass
class ServiceMethod:
    name: str
    description: str
    request_type: str
    request_long_type: str
    request_full_type: str
    request_streaming: bool
    response_type: str
    response_long_type: str
    response_full_type: str
    response_streaming: bool


@dataclass
class Service:
    name: str
    long_name: str
    full_name: str
    description: str
    methods: list[ServiceMethod] = field(default_factory=list)


@dataclass
class File:
    name: str
    description: str
    package: str
    enums: list[Enum] = field(default_factory=list)
    extensions: list[FileExtension] = field(default_factory=list)
    messages: list[Message] = field(default_factory=list)
    services: list[Service] = field(default_factory=list)

    @property
    def has_enums(self) -> bool:
        return bool(self.enums)

    @property
    def has_extensions(self) -> bool:
        return bool(self.extensions)

    @property
    def has_messages(self) -> bool:
        return bool(self.messages)

    @property
    def has_services(self) -> bool:
        return bool(self.services)


@dataclass
class Template:
    """Data passed to every renderer for one output group."""

    files: list[File]
    scalar_value_types: Sequence[ScalarValue] = SCALAR_VALUE_TYPES

    @classmethod
    def from_descriptors(
        cls,
        fds: Sequence[descriptor_pb2.FileDescriptorProto],
        options: PluginOptions,
        all_files: Iterable[descriptor_pb2.FileDescriptorProto] | None = None,
    ) -> Template:
        """Build the template model for a group of file descriptors.

        Args:
            fds: Descriptors to document, in output order.
            options: Parsed plugin options (field casing and directives).
            all_files: Every descriptor of the request, used to resolve the
                package of referenced types. Defaults to ``fds``.

        Returns:
            Template with one File per descriptor, in the same order.
        """
        packages = _type_packages(all_files if all_files is not None else fds)
        builder = _FileBuilder(options, packages)
        return cls(files=[builder.build(fd) for fd in fds])

    def context(self) -> dict[str, Any]:
        """Return the variables exposed to Jinja2 templates."""
        return {
            "files": self.files,
            "scalar_value_types": list(self.scalar_value_types),
        }

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dict with camelCase keys."""
        return _to_json(self)


def _lower_camel(name: str) -> str:
    """Convert a snake_case identifier to lowerCamelCase."""
    head, *rest = name.split("_")
    return head[:1].lower() + head[1:] + "".join(p[:1].upper() + p[1:] for p in rest)


def _to_json(value: Any) -> Any:
    if is_dataclass(value):
        result = {_lower_camel(f.name): _to_json(getattr(value, f.name)) for f in fields(value)}
        for name in dir(type(value)):
            if name.startswith("has_") and isinstance(getattr(type(value), name), property):
                result[_lower_camel(name)] = getattr(value, name)
        return result
    if isinstance(value, (list, tuple)):
        return [_to_json(v) for v in value]
    return value


def _type_packages(
    files: Iterable[descriptor_pb2.FileDescriptorProto],
) -> dict[str, str]:
    """Map every fully qualified message and enum name to its package."""
    packages: dict[str, str] = {}

    def add_message(msg: descriptor_pb2.DescriptorProto, prefix: str, package: str) -> None:
        name = f"{prefix}.{msg.name}" if prefix else msg.name
        packages[name] = package
        for nested in msg.nested_type:
            add_message(nested, name, package)
        for enum in msg.enum_type:
            packages[f"{name}.{enum.name}"] = package

    for fd in files:
        for msg in fd.message_type:
            add_message(msg, fd.package, fd.package)
        for enum in fd.enum_type:
            packages[_qualify(fd.package, enum.name)] = fd.package
        for svc in fd.service:
            packages[_qualify(fd.package, svc.name)] = fd.package
    return packages


def _qualify(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def _strip_package(full_name: str, package: str) -> str:
    if package and full_name.startswith(package + "."):
        return full_name[len(package) + 1 :]
    return full_name


def _clean_comment(comment: str) -> str:
    # protoc keeps the space following "//" on every line
    lines = [line[1:] if line.startswith(" ") else line for line in comment.split("\n")]
    return "\n".join(lines).strip("\n").rstrip()


class _FileBuilder:
    """Builds File models, one descriptor at a time."""

    def __init__(self, options: PluginOptions, packages: dict[str, str]):
        self.options = options
        self.packages = packages
        self._comments: dict[tuple[int, ...], str] = {}
        self._fd: descriptor_pb2.FileDescriptorProto | None = None

    def build(self, fd: descriptor_pb2.FileDescriptorProto) -> File:
        self._fd = fd
        self._comments = {}
        for location in fd.source_code_info.location:
            parts = [
                _clean_comment(c)
                for c in (location.leading_comments, location.trailing_comments)
                if c.strip()
            ]
            if parts:
                self._comments[tuple(location.path)] = "\n\n".join(parts)

        # The first commented statement wins, even when its text is excluded
        description = ""
        for path in ((_FILE_SYNTAX,), (_FILE_EDITION,), (_FILE_PACKAGE,)):
            if path in self._comments:
                description = self._description(path) or ""
                break

        file = File(name=fd.name, description=description, package=fd.package)

        for i, msg in enumerate(fd.message_type):
            self._add_message(file, msg, (_FILE_MESSAGE_TYPE, i), "")
        for i, enum in enumerate(fd.enum_type):
            self._add_enum(file, enum, (_FILE_ENUM_TYPE, i), "")
        for i, ext in enumerate(fd.extension):
            built = self._extension(ext, (_FILE_EXTENSION, i), "")
            if built is not None:
                file.extensions.append(built)
        for i, svc in enumerate(fd.service):
            built_svc = self._service(svc, (_FILE_SERVICE, i))
            if built_svc is not None:
                file.services.append(built_svc)

        file.messages.sort(key=lambda m: m.long_name)
        file.enums.sort(key=lambda e: e.long_name)
        file.extensions.sort(key=lambda e: e.long_name)
        file.services.sort(key=lambda s: s.name)
        return file

    def _description(self, path: tuple[int, ...]) -> str | None:
        """Return the description at path, or None if it is excluded.

        Lines containing a line directive are dropped. A first paragraph
        starting with a block directive excludes the whole element; any
        later paragraph starting with one is dropped.
        """
        comment = self._comments.get(path, "")
        if not comment:
            return ""

        line_directives = self.options.exclude_line_directives
        lines = [
            line
            for line in comment.split("\n")
            if not any(d in line for d in line_directives)
        ]

        directives = tuple(self.options.exclude_directives)
        paragraphs = _PARAGRAPH_SEP_RE.split("\n".join(lines).strip())
        if paragraphs and paragraphs[0].lstrip().startswith(directives):
            return None
        kept = [p for p in paragraphs if not p.lstrip().startswith(directives)]
        return "\n\n".join(kept).strip()

    def _type_names(self, type_name: str) -> tuple[str, str, str]:
        """Return (type, long_type, full_type) for a ".pkg.Outer.Inner" reference."""
        full_type = type_name.lstrip(".")
        package = self.packages.get(full_type)
        if package is None:
            package = self._fd.package if self._fd is not None else ""
        long_type = _strip_package(full_type, package)
        return full_type.rsplit(".", 1)[-1], long_type, full_type

    def _field_types(self, fd: FieldDescriptorProto) -> tuple[str, str, str]:
        if fd.type in _NAMED_TYPES and fd.type_name:
            return self._type_names(fd.type_name)
        scalar = FieldDescriptorProto.Type.Name(fd.type)[len("TYPE_"):].lower()
        return scalar, scalar, scalar

    def _label(self, fd: FieldDescriptorProto) -> str:
        if fd.label == FieldDescriptorProto.LABEL_REPEATED:
            return "repeated"
        if fd.label == FieldDescriptorProto.LABEL_REQUIRED:
            return "required"
        if self._fd is not None and self._fd.syntax == "proto3" and not fd.proto3_optional:
            return ""
        return "optional"

    def _field_name(self, name: str) -> str:
        return _lower_camel(name) if self.options.camel_case_fields else name

    def _add_message(
        self,
        file: File,
        msg: descriptor_pb2.DescriptorProto,
        path: tuple[int, ...],
        parent: str,
    ) -> None:
        description = self._description(path)
        if description is None:
            return

        long_name = f"{parent}.{msg.name}" if parent else msg.name
        message = Message(
            name=msg.name,
            long_name=long_name,
            full_name=_qualify(file.package, long_name),
            description=description,
        )
        map_entries = {
            _qualify(message.full_name, n.name)
            for n in msg.nested_type
            if n.options.map_entry
        }

        for i, fld in enumerate(msg.field):
            field_description = self._description(path + (_MESSAGE_FIELD, i))
            if field_description is None:
                continue
            type_, long_type, full_type = self._field_types(fld)
            is_oneof = fld.HasField("oneof_index") and not fld.proto3_optional
            message.fields.append(
                MessageField(
                    name=self._field_name(fld.name),
                    description=field_description,
                    label=self._label(fld),
                    type=type_,
                    long_type=long_type,
                    full_type=full_type,
                    ismap=full_type in map_entries,
                    isoneof=is_oneof,
                    oneofdecl=msg.oneof_decl[fld.oneof_index].name if is_oneof else "",
                    default_value=fld.default_value,
                )
            )

        for i, ext in enumerate(msg.extension):
            built = self._extension(ext, path + (_MESSAGE_EXTENSION, i), long_name)
            if built is not None:
                message.extensions.append(built)

        file.messages.append(message)

        for i, nested in enumerate(msg.nested_type):
            self._add_message(file, nested, path + (_MESSAGE_NESTED_TYPE, i), long_name)
        for i, enum in enumerate(msg.enum_type):
            self._add_enum(file, enum, path + (_MESSAGE_ENUM_TYPE, i), long_name)

    def _add_enum(
        self,
        file: File,
        enum: descriptor_pb2.EnumDescriptorProto,
        path: tuple[int, ...],
        parent: str,
    ) -> None:
        description = self._description(path)
        if description is None:
            return

        long_name = f"{parent}.{enum.name}" if parent else enum.name
        built = Enum(
            name=enum.name,
            long_name=long_name,
            full_name=_qualify(file.package, long_name),
            description=description,
        )
        for i, value in enumerate(enum.value):
            value_description = self._description(path + (_ENUM_VALUE, i))
            if value_description is None:
                continue
            built.values.append(
                EnumValue(name=value.name, number=value.number, description=value_description)
            )
        file.enums.append(built)

    def _extension(
        self, ext: FieldDescriptorProto, path: tuple[int, ...], scope: str
    ) -> FileExtension | None:
        description = self._description(path)
        if description is None:
            return None

        package = self._fd.package if self._fd is not None else ""
        long_name = f"{scope}.{ext.name}" if scope else ext.name
        type_, long_type, full_type = self._field_types(ext)
        containing_type, containing_long_type, containing_full_type = self._type_names(
            ext.extendee
        )
        return FileExtension(
            name=ext.name,
            long_name=long_name,
            full_name=_qualify(package, long_name),
            description=description,
            label=self._label(ext),
            type=type_,
            long_type=long_type,
            full_type=full_type,
            number=ext.number,
            default_value=ext.default_value,
            containing_type=containing_type,
            containing_long_type=containing_long_type,
            containing_full_type=containing_full_type,
        )

    def _service(
        self, svc: descriptor_pb2.ServiceDescriptorProto, path: tuple[int, ...]
    ) -> Service | None:
        description = self._description(path)
        if description is None:
            return None

        package = self._fd.package if self._fd is not None else ""
        service = Service(
            name=svc.name,
            long_name=svc.name,
            full_name=_qualify(package, svc.name),
            description=description,
        )
        for i, method in enumerate(svc.method):
            method_description = self._description(path + (_SERVICE_METHOD, i))
            if method_description is None:
                continue
            req_type, req_long, req_full = self._type_names(method.input_type)
            resp_type, resp_long, resp_full = self._type_names(method.output_type)
            service.methods.append(
                ServiceMethod(
                    name=method.name,
                    description=method_description,
                    request_type=req_type,
                    request_long_type=req_long,
                    request_full_type=req_full,
                    request_streaming=method.client_streaming,
                    response_type=resp_type,
                    response_long_type=resp_long,
                    response_full_type=resp_full,
                    response_streaming=method.server_streaming,
                )
            )
        return service
