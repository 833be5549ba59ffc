"""Shared fixtures: file descriptors shaped like the ones protoc sends."""

import pytest
from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2

FieldDescriptorProto = descriptor_pb2.FieldDescriptorProto


def add_comment(fd, path, leading="", trailing=""):
    """Attach a source comment to the element at path."""
    location = fd.source_code_info.location.add()
    location.path.extend(path)
    location.span.extend([0, 0, 0])
    if leading:
        location.leading_comments = leading
    if trailing:
        location.trailing_comments = trailing
    return location


def make_file(name, package="com.example", syntax="proto3"):
    """Create a file descriptor with a single commented message."""
    fd = descriptor_pb2.FileDescriptorProto(name=name, package=package, syntax=syntax)
    msg = fd.message_type.add(name="Thing")
    msg.field.add(
        name="id",
        number=1,
        type=FieldDescriptorProto.TYPE_INT64,
        label=FieldDescriptorProto.LABEL_OPTIONAL,
    )
    add_comment(fd, [12], leading=f" Definitions from {name}.\n")
    add_comment(fd, [4, 0], leading=" A thing.\n")
    return fd


def make_request(fds, parameter="", files_to_generate=None):
    """Create a CodeGeneratorRequest for the given descriptors."""
    request = plugin_pb2.CodeGeneratorRequest(parameter=parameter)
    request.proto_file.extend(fds)
    if files_to_generate is None:
        files_to_generate = [fd.name for fd in fds]
    request.file_to_generate.extend(files_to_generate)
    return request


@pytest.fixture
def booking_proto():
    """A proto3 file with messages, a map, an enum, a service and directives."""
    fd = descriptor_pb2.FileDescriptorProto(
        name="com/example/booking.proto",
        package="com.example",
        syntax="proto3",
    )

    booking = fd.message_type.add(name="Booking")
    booking.field.add(
        name="vehicle_id",
        number=1,
        type=FieldDescriptorProto.TYPE_INT32,
        label=FieldDescriptorProto.LABEL_OPTIONAL,
    )
    booking.field.add(
        name="status",
        number=2,
        type=FieldDescriptorProto.TYPE_ENUM,
        type_name=".com.example.BookingStatus",
        label=FieldDescriptorProto.LABEL_OPTIONAL,
    )
    booking.field.add(
        name="tags",
        number=3,
        type=FieldDescriptorProto.TYPE_STRING,
        label=FieldDescriptorProto.LABEL_REPEATED,
    )
    booking.field.add(
        name="internal_note",
        number=4,
        type=FieldDescriptorProto.TYPE_STRING,
        label=FieldDescriptorProto.LABEL_OPTIONAL,
    )
    booking.field.add(
        name="labels",
        number=5,
        type=FieldDescriptorProto.TYPE_MESSAGE,
        type_name=".com.example.Booking.LabelsEntry",
        label=FieldDescriptorProto.LABEL_REPEATED,
    )
    booking.oneof_decl.add(name="payment")
    booking.field.add(
        name="card_token",
        number=6,
        type=FieldDescriptorProto.TYPE_STRING,
        label=FieldDescriptorProto.LABEL_OPTIONAL,
        oneof_index=0,
    )

    entry = booking.nested_type.add(name="LabelsEntry")
    entry.options.map_entry = True
    entry.field.add(
        name="key",
        number=1,
        type=FieldDescriptorProto.TYPE_STRING,
        label=FieldDescriptorProto.LABEL_OPTIONAL,
    )
    entry.field.add(
        name="value",
        number=2,
        type=FieldDescriptorProto.TYPE_STRING,
        label=FieldDescriptorProto.LABEL_OPTIONAL,
    )

    fd.message_type.add(name="Secret")

    status = fd.enum_type.add(name="BookingStatus")
    status.value.add(name="UNKNOWN", number=0)
    status.value.add(name="CONFIRMED", number=1)

    service = fd.service.add(name="BookingService")
    service.method.add(
        name="BookVehicle",
        input_type=".com.example.Booking",
        output_type=".com.example.Booking",
    )
    service.method.add(
        name="WatchBookings",
        input_type=".com.example.Booking",
        output_type=".com.example.Booking",
        server_streaming=True,
    )

    add_comment(fd, [12], leading=" Booking related messages.\n")
    add_comment(fd, [4, 0], leading=" Represents the booking of a vehicle.\n\n Vehicles are\n rented.\n")
    add_comment(fd, [4, 0, 2, 0], leading=" ID of booked vehicle.\n")
    add_comment(fd, [4, 0, 2, 3], leading=" @exclude internal only.\n")
    add_comment(
        fd,
        [4, 0, 2, 2],
        leading=" Free form tags.\n Internal: drop this line @exclude-line\n",
    )
    add_comment(fd, [4, 1], leading=" @exclude\n Not for public eyes.\n")
    add_comment(fd, [5, 0], leading=" The status of a booking.\n")
    add_comment(fd, [5, 0, 2, 1], trailing=" Booking was confirmed.\n")
    add_comment(fd, [6, 0], leading=" Service for handling bookings.\n")
    add_comment(fd, [6, 0, 2, 0], leading=" Used to book a vehicle.\n")
    return fd


@pytest.fixture
def booking_request(booking_proto):
    """A request generating documentation for booking.proto."""
    return make_request([booking_proto], parameter="html,index.html")
