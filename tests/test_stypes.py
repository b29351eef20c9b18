"""Tests for the primitive codecs."""

import json
import math
from datetime import date, datetime, timedelta, timezone

import pytest

from heisenberg.stypes import (
    OMIT,
    BooleanType,
    DateType,
    NumberType,
    RawType,
    SerializableType,
    StringType,
    Type,
    get_type,
    is_primitive_type,
    json_default,
)


# ============================================================================
# Boolean
# ============================================================================


class TestBoolean:
    def test_serialize_passes_booleans_through(self):
        assert BooleanType.serialize(True) is True
        assert BooleanType.serialize(False) is False

    def test_serialize_omits_none(self):
        assert BooleanType.serialize(None) is OMIT

    def test_deserialize_none(self):
        assert BooleanType.deserialize(None) is None

    @pytest.mark.parametrize("raw", ["true", "TRUE", "yes", "Yes", "y", "T", "1"])
    def test_deserialize_truthy_strings(self, raw):
        assert BooleanType.deserialize(raw) is True

    @pytest.mark.parametrize("raw", ["false", "no", "", "yes please", "2"])
    def test_deserialize_other_strings(self, raw):
        assert BooleanType.deserialize(raw) is False

    def test_deserialize_numbers(self):
        assert BooleanType.deserialize(1) is True
        assert BooleanType.deserialize(0) is False
        assert BooleanType.deserialize(2) is False

    def test_deserialize_unknown_types_into_false(self):
        assert BooleanType.deserialize(lambda: None) is False
        assert BooleanType.deserialize({"a": 1}) is False


# ============================================================================
# Number
# ============================================================================


class TestNumber:
    def test_serialize_zero(self):
        assert NumberType.serialize(0) == 0

    def test_serialize_omits_empty_values(self):
        assert NumberType.serialize(None) is OMIT
        assert NumberType.serialize("") is OMIT
        assert NumberType.serialize([]) is OMIT

    def test_deserialize_numeric_strings(self):
        assert NumberType.deserialize("123") == 123
        assert NumberType.deserialize(" 1.5 ") == 1.5
        assert NumberType.deserialize("1e3") == 1000.0

    def test_deserialize_numbers(self):
        assert NumberType.deserialize(42) == 42
        assert NumberType.deserialize(0) == 0
        assert NumberType.deserialize(True) == 1

    def test_deserialize_empty_values_into_none(self):
        assert NumberType.deserialize(None) is None
        assert NumberType.deserialize("") is None

    def test_deserialize_garbage_into_nan(self):
        assert math.isnan(NumberType.deserialize("abc"))

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_serialize_omits_non_finite(self, value):
        assert NumberType.serialize(value) is OMIT

    def test_unparseable_text_never_reaches_json(self):
        value = NumberType.serialize(NumberType.deserialize("abc"))
        assert value is OMIT


# ============================================================================
# String
# ============================================================================


class TestString:
    def test_serialize(self):
        assert StringType.serialize("foo") == "foo"
        assert StringType.serialize("") == ""
        assert StringType.serialize(None) is OMIT

    def test_deserialize_coerces(self):
        assert StringType.deserialize("foo") == "foo"
        assert StringType.deserialize(123) == "123"
        assert StringType.deserialize(True) == "true"
        assert StringType.deserialize(None) is None


# ============================================================================
# Date
# ============================================================================


class TestDate:
    def test_serialize_aware_datetime(self):
        value = datetime(2014, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert DateType.serialize(value) == "2014-01-02T03:04:05+00:00"

    def test_serialize_naive_datetime_with_local_offset(self):
        value = datetime(2014, 1, 2, 3, 4, 5)
        assert DateType.serialize(value) == value.astimezone().isoformat()

    def test_serialize_date(self):
        assert DateType.serialize(date(2014, 1, 2)) == "2014-01-02"

    def test_serialize_omits_none(self):
        assert DateType.serialize(None) is OMIT

    def test_deserialize_iso_string(self):
        value = DateType.deserialize("2014-05-06T07:08:09+02:00")
        assert isinstance(value, datetime)
        assert value.utcoffset() == timedelta(hours=2)
        assert value == datetime(2014, 5, 6, 5, 8, 9, tzinfo=timezone.utc)

    def test_deserialize_epoch_milliseconds(self):
        assert DateType.deserialize(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_deserialize_none(self):
        assert DateType.deserialize(None) is None

    @pytest.mark.parametrize("raw", ["", "   "])
    def test_deserialize_blank_into_none(self, raw):
        assert DateType.deserialize(raw) is None

    @pytest.mark.parametrize("raw", ["not a date", "2014-02-30"])
    def test_deserialize_unparseable_into_none(self, raw):
        assert DateType.deserialize(raw) is None

    def test_deserialize_out_of_range_epoch_into_none(self):
        assert DateType.deserialize(1e20) is None
        assert DateType.deserialize(math.nan) is None

    def test_round_trip_is_the_same_instant(self):
        now = datetime.now()
        assert DateType.deserialize(DateType.serialize(now)) == now.astimezone()


# ============================================================================
# Raw
# ============================================================================


class TestRaw:
    def test_passes_values_through(self):
        value = {"nested": [1, 2]}
        assert RawType.serialize(value) is value
        assert RawType.deserialize(value) is value

    def test_passes_none_through(self):
        assert RawType.serialize(None) is None
        assert RawType.deserialize(None) is None


# ============================================================================
# Registry
# ============================================================================


class TestRegistry:
    def test_type_namespace(self):
        assert Type.Boolean is BooleanType
        assert Type.Date is DateType
        assert Type.Number is NumberType
        assert Type.Raw is RawType
        assert Type.String is StringType

    def test_get_type(self):
        assert get_type("number") is NumberType
        with pytest.raises(KeyError):
            get_type("decimal")

    def test_is_primitive_type(self):
        assert is_primitive_type(StringType)
        assert not is_primitive_type(SerializableType)
        assert not is_primitive_type(str)
        assert not is_primitive_type("string")

    def test_omit_is_falsy_singleton(self):
        assert not OMIT
        assert type(OMIT)() is OMIT

    def test_json_default_encodes_dates(self):
        value = datetime(2014, 1, 2, tzinfo=timezone.utc)
        assert json.dumps({"at": value}, default=json_default) == '{"at": "2014-01-02T00:00:00+00:00"}'

    def test_json_default_rejects_other_objects(self):
        with pytest.raises(TypeError):
            json.dumps({"x": object()}, default=json_default)
