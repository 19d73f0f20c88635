"""Tests for rendering and parsing single values."""

import datetime as dt
import math
import uuid
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

import pytest

from conseq.errors import MalformedValue, UnknownSymbol, UnrepresentableValue
from conseq.registry import shape_of
from conseq.types import (
    BOOLEAN,
    DATE,
    DATETIME,
    DECIMAL,
    DURATION,
    FLOAT,
    IDENTIFIER,
    INTEGER,
    TEXT,
    TIME,
    ConseqFormat,
)
from conseq.values import format_duration, parse_duration, parse_value, render_value


class Level(Enum):
    LOW = 1
    HIGH = 2


@dataclass
class Point:
    x: int = 0
    y: int = 0


class TestScalars:
    """Tests for booleans and numbers."""

    def test_booleans(self):
        assert render_value(True, BOOLEAN) == "true"
        assert render_value(False, BOOLEAN) == "false"
        assert parse_value("true", BOOLEAN) is True
        assert parse_value("FALSE", BOOLEAN) is False
        assert parse_value(" True ", BOOLEAN) is True

    def test_boolean_rejects_other_words(self):
        with pytest.raises(MalformedValue):
            parse_value("yes", BOOLEAN)

    def test_integers(self):
        assert render_value(-42, INTEGER) == "-42"
        assert parse_value(" 42 ", INTEGER) == 42
        with pytest.raises(MalformedValue):
            parse_value("4.2", INTEGER)

    def test_float_never_uses_exponent(self):
        assert render_value(1e20, FLOAT) == "100000000000000000000"
        assert render_value(1.5e-7, FLOAT) == "0.00000015"
        assert render_value(0.1, FLOAT) == "0.1"
        assert render_value(2.0, FLOAT) == "2.0"

    def test_float_reads_back_exactly(self):
        for value in (0.1, 1 / 3, 123456.789, -2.5e-300):
            assert parse_value(render_value(value, FLOAT), FLOAT) == value

    def test_float_infinity_and_nan(self):
        assert render_value(float("inf"), FLOAT) == "Infinity"
        assert render_value(float("-inf"), FLOAT) == "-Infinity"
        assert render_value(float("nan"), FLOAT) == "NaN"
        assert parse_value("Infinity", FLOAT) == float("inf")
        assert parse_value("-Infinity", FLOAT) == float("-inf")
        assert math.isnan(parse_value("NaN", FLOAT))

    def test_decimals(self):
        assert render_value(Decimal("123.45"), DECIMAL) == "123.45"
        assert render_value(Decimal("1E+3"), DECIMAL) == "1000"
        assert parse_value("123.45", DECIMAL) == Decimal("123.45")
        with pytest.raises(MalformedValue):
            parse_value("12,5", DECIMAL)

    def test_empty_leaf_is_malformed(self):
        with pytest.raises(MalformedValue, match="empty text"):
            parse_value("  ", INTEGER)


class TestText:
    """Tests for text values."""

    def test_verbatim(self):
        assert render_value("hello world", TEXT) == "hello world"
        assert parse_value(" padded ", TEXT) == " padded "

    def test_empty_text_is_valid(self):
        assert parse_value("", TEXT) == ""


class TestTemporal:
    """Tests for dates, times and durations."""

    def test_datetime(self):
        value = dt.datetime(2024, 1, 2, 3, 4, 5)
        assert render_value(value, DATETIME) == "2024-01-02T03:04:05"
        assert parse_value("2024-01-02T03:04:05", DATETIME) == value

    def test_date_and_time(self):
        assert render_value(dt.date(2024, 2, 29), DATE) == "2024-02-29"
        assert parse_value("2024-02-29", DATE) == dt.date(2024, 2, 29)
        assert render_value(dt.time(13, 5), TIME) == "13:05:00"
        assert parse_value("13:05:00", TIME) == dt.time(13, 5)

    def test_bad_date(self):
        with pytest.raises(MalformedValue):
            parse_value("2023-02-29", DATE)

    def test_duration_format(self):
        assert format_duration(dt.timedelta(minutes=90)) == "01:30:00"
        assert format_duration(dt.timedelta(days=1, seconds=1, microseconds=5)) == "1.00:00:01.000005"
        assert format_duration(dt.timedelta(seconds=-1)) == "-00:00:01"
        assert format_duration(dt.timedelta(0)) == "00:00:00"

    def test_duration_parse(self):
        assert parse_duration("01:30:00") == dt.timedelta(minutes=90)
        assert parse_duration("2.03:04:05.5") == dt.timedelta(days=2, hours=3, minutes=4, seconds=5, microseconds=500000)
        assert parse_duration("-1.00:00:00") == dt.timedelta(days=-1)

    def test_duration_round_trip(self):
        for value in (
            dt.timedelta(days=-3, microseconds=7),
            dt.timedelta(hours=23, minutes=59, seconds=59, microseconds=999999),
            dt.timedelta(days=400),
        ):
            assert parse_value(render_value(value, DURATION), DURATION) == value

    @pytest.mark.parametrize("text", ["90", "1:2:3", "24:00:00", "00:60:00", "1.2.00:00:00"])
    def test_bad_durations(self, text):
        with pytest.raises(MalformedValue):
            parse_value(text, DURATION)


class TestIdentifiersAndEnums:
    """Tests for UUIDs and enum symbols."""

    def test_identifier(self):
        value = uuid.UUID("12345678-1234-5678-1234-567812345678")
        assert render_value(value, IDENTIFIER) == "12345678-1234-5678-1234-567812345678"
        assert parse_value("12345678-1234-5678-1234-567812345678".upper(), IDENTIFIER) == value
        with pytest.raises(MalformedValue):
            parse_value("not-a-uuid", IDENTIFIER)

    def test_enum(self):
        shape = shape_of(Level)
        assert render_value(Level.HIGH, shape) == "HIGH"
        assert parse_value("HIGH", shape) is Level.HIGH
        assert parse_value("low", shape) is Level.LOW

    def test_unknown_symbol(self):
        with pytest.raises(UnknownSymbol) as excinfo:
            parse_value("MEDIUM", shape_of(Level))
        assert "LOW, HIGH" in str(excinfo.value)


class TestComposites:
    """Tests for nullable, sequence and mapping values."""

    def test_nullable(self):
        shape = shape_of(int | None)
        assert render_value(None, shape) == ""
        assert render_value(5, shape) == "5"
        assert parse_value("", shape) is None
        assert parse_value("5", shape) == 5

    def test_nullable_text_empty_is_none(self):
        assert parse_value("", shape_of(str | None)) is None

    def test_blank_value_under_nullable_rejected(self):
        for value, annotation in (("", str | None), ("  ", str | None), ([], list[int] | None), ({}, dict[str, int] | None)):
            with pytest.raises(UnrepresentableValue, match="None"):
                render_value(value, shape_of(annotation))

    def test_blank_nullable_element_rejected(self):
        with pytest.raises(UnrepresentableValue):
            render_value(["a", ""], shape_of(list[str | None]))

    def test_sequences(self):
        assert render_value((0, 0, 0, 1), shape_of(tuple[int, ...])) == "0;0;0;1"
        assert parse_value("0;0;0;1", shape_of(tuple[int, ...])) == (0, 0, 0, 1)
        assert parse_value("hello;world;!", shape_of(list[str])) == ["hello", "world", "!"]
        assert parse_value("1;2;2", shape_of(set[int])) == {1, 2}

    def test_empty_sequence(self):
        assert render_value([], shape_of(list[int])) == ""
        assert parse_value("", shape_of(list[int])) == []
        assert parse_value("", shape_of(tuple[int, ...])) == ()

    def test_sequence_of_nullables(self):
        assert parse_value("1;;3", shape_of(list[int | None])) == [1, None, 3]

    def test_bad_sequence_element(self):
        with pytest.raises(MalformedValue):
            parse_value("1;x;3", shape_of(list[int]))

    def test_mapping(self):
        shape = shape_of(dict[str, int])
        assert render_value({"A": 1, "B": 2}, shape) == "A:1;B:2"
        assert parse_value("A:1;B:2", shape) == {"A": 1, "B": 2}
        assert parse_value("", shape) == {}

    def test_mapping_date_keys(self):
        shape = shape_of(dict[dt.date, Decimal])
        value = {dt.date(2024, 1, 1): Decimal("9.5")}
        assert render_value(value, shape) == "2024-01-01:9.5"
        assert parse_value("2024-01-01:9.5", shape) == value

    def test_mapping_entry_without_colon(self):
        with pytest.raises(MalformedValue, match="exactly one ':'"):
            parse_value("A:1;B", shape_of(dict[str, int]))

    def test_mapping_duplicate_key(self):
        with pytest.raises(MalformedValue, match="duplicate key"):
            parse_value("A:1;A:2", shape_of(dict[str, int]))


class TestBlocks:
    """Tests for nested record values."""

    def test_render_block_per_layout(self):
        shape = shape_of(Point)
        point = Point(1, 2)
        assert render_value(point, shape) == "{\nx = 1\ny = 2\n}"
        assert render_value(point, shape, ConseqFormat.COMPACT) == "{ x:1 y:2 }"
        assert render_value(point, shape, ConseqFormat.READABLE) == "{\n    x = 1,\n    y = 2\n}"

    def test_parse_block(self):
        shape = shape_of(Point)
        assert parse_value("{\nx = 1\ny = 2\n}", shape) == Point(1, 2)
        assert parse_value("{ x:1 y:2 }", shape) == Point(1, 2)

    def test_parse_block_without_braces(self):
        with pytest.raises(MalformedValue, match="block"):
            parse_value("x = 1", shape_of(Point))
