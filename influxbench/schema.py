"""
Explicit measurement schema used to turn samples into database points.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Iterable, List

from influxdb_client import Point, WritePrecision
from pydantic import BaseModel, Field, model_validator


class FieldRole(str, Enum):
    """How a value is stored in the measurement."""
    TIMESTAMP = "timestamp"
    TAG = "tag"
    FIELD = "field"


class ValueType(str, Enum):
    """Value types a column may hold."""
    FLOAT = "float"
    INTEGER = "integer"
    STRING = "string"
    DATETIME = "datetime"


_COERCE = {
    ValueType.FLOAT: float,
    ValueType.INTEGER: int,
    ValueType.STRING: str,
}


class FieldDescriptor(BaseModel):
    """Maps one attribute of a record to a column of the measurement."""
    name: str = Field(..., description="Column name in the database")
    attribute: str = Field(..., description="Attribute read from the record")
    role: FieldRole
    type: ValueType = ValueType.FLOAT


class MeasurementSchema(BaseModel):
    """Measurement name plus an ordered list of column descriptors."""
    measurement: str
    columns: List[FieldDescriptor]

    @model_validator(mode="after")
    def _check_columns(self) -> "MeasurementSchema":
        timestamps = [c for c in self.columns if c.role is FieldRole.TIMESTAMP]
        if len(timestamps) != 1:
            raise ValueError("schema needs exactly one timestamp column")
        if timestamps[0].type is not ValueType.DATETIME:
            raise ValueError("timestamp column must have type datetime")
        if not any(c.role is FieldRole.FIELD for c in self.columns):
            raise ValueError("schema needs at least one field column")
        names = [c.name for c in self.columns]
        if len(set(names)) != len(names):
            raise ValueError("column names must be unique")
        return self

    @property
    def tag_names(self) -> List[str]:
        return [c.name for c in self.columns if c.role is FieldRole.TAG]

    @property
    def field_names(self) -> List[str]:
        return [c.name for c in self.columns if c.role is FieldRole.FIELD]

    def to_point(self, record: Any, precision: str = WritePrecision.MS) -> Point:
        """Convert a record into a point, following the column order."""
        point = Point(self.measurement)
        for column in self.columns:
            value = getattr(record, column.attribute)
            if column.role is FieldRole.TIMESTAMP:
                if not isinstance(value, datetime):
                    raise TypeError(f"{column.attribute} must be a datetime, got {type(value).__name__}")
                point.time(value, precision)
            elif column.role is FieldRole.TAG:
                point.tag(column.name, str(value))
            else:
                point.field(column.name, _COERCE.get(column.type, str)(value))
        return point

    def to_points(self, records: Iterable[Any], precision: str = WritePrecision.MS) -> List[Point]:
        return [self.to_point(record, precision) for record in records]


SENSOR_SCHEMA = MeasurementSchema(
    measurement="realtime_record",
    columns=[
        FieldDescriptor(name="time", attribute="timestamp", role=FieldRole.TIMESTAMP, type=ValueType.DATETIME),
        FieldDescriptor(name="sensorId", attribute="sensor_id", role=FieldRole.TAG, type=ValueType.STRING),
        FieldDescriptor(name="z", attribute="z", role=FieldRole.FIELD),
        FieldDescriptor(name="x", attribute="x", role=FieldRole.FIELD),
        FieldDescriptor(name="y", attribute="y", role=FieldRole.FIELD),
    ],
)
