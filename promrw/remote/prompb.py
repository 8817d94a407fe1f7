"""Protocol buffer messages for the Prometheus remote write v1 schema.

The message classes are built at import time from a FileDescriptorProto
that mirrors the write path of ``prompb/types.proto`` and
``prompb/remote.proto``. Field numbers must stay in sync with upstream:

    message Label        { string name = 1; string value = 2; }
    message Sample       { double value = 1; int64 timestamp = 2; }
    message TimeSeries   { repeated Label labels = 1; repeated Sample samples = 2; }
    message WriteRequest { repeated TimeSeries timeseries = 1; }
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_FieldProto = descriptor_pb2.FieldDescriptorProto

PACKAGE = "prometheus"


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    fdp = descriptor_pb2.FileDescriptorProto()
    fdp.name = "promrw/remote_write.proto"
    fdp.package = PACKAGE
    fdp.syntax = "proto3"

    msg = fdp.message_type.add()
    msg.name = "Label"
    msg.field.add(
        name="name", number=1, type=_FieldProto.TYPE_STRING, label=_FieldProto.LABEL_OPTIONAL
    )
    msg.field.add(
        name="value", number=2, type=_FieldProto.TYPE_STRING, label=_FieldProto.LABEL_OPTIONAL
    )

    msg = fdp.message_type.add()
    msg.name = "Sample"
    msg.field.add(
        name="value", number=1, type=_FieldProto.TYPE_DOUBLE, label=_FieldProto.LABEL_OPTIONAL
    )
    msg.field.add(
        name="timestamp",
        number=2,
        type=_FieldProto.TYPE_INT64,
        label=_FieldProto.LABEL_OPTIONAL,
    )

    msg = fdp.message_type.add()
    msg.name = "TimeSeries"
    msg.field.add(
        name="labels",
        number=1,
        type=_FieldProto.TYPE_MESSAGE,
        label=_FieldProto.LABEL_REPEATED,
        type_name=f".{PACKAGE}.Label",
    )
    msg.field.add(
        name="samples",
        number=2,
        type=_FieldProto.TYPE_MESSAGE,
        label=_FieldProto.LABEL_REPEATED,
        type_name=f".{PACKAGE}.Sample",
    )

    msg = fdp.message_type.add()
    msg.name = "WriteRequest"
    msg.field.add(
        name="timeseries",
        number=1,
        type=_FieldProto.TYPE_MESSAGE,
        label=_FieldProto.LABEL_REPEATED,
        type_name=f".{PACKAGE}.TimeSeries",
    )

    return fdp


# Private pool so the schema never clashes with another copy of prompb
# registered in the default pool.
_pool = descriptor_pool.DescriptorPool()
DESCRIPTOR = _pool.AddSerializedFile(_build_file_descriptor().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))


Label = _message_class("Label")
Sample = _message_class("Sample")
TimeSeries = _message_class("TimeSeries")
WriteRequest = _message_class("WriteRequest")

__all__ = ["DESCRIPTOR", "Label", "Sample", "TimeSeries", "WriteRequest"]
