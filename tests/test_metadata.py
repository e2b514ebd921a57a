"""
Tests for capture-date resolution
"""
from datetime import datetime, timedelta, timezone

import pytest

from photo_reminisce.errors import MetadataReadError
from photo_reminisce.metadata import (
    MetadataResolver,
    convert_exif_date,
    parse_date,
    read_tags,
)

from conftest import make_jpeg


class TestReadTags:

    def test_exif_date_time_original(self):
        tags = read_tags(make_jpeg(date_time_original="2021:07:04 18:30:00"))
        assert tags["DateTimeOriginal"] == "2021:07:04 18:30:00"

    def test_xmp_create_date(self):
        tags = read_tags(make_jpeg(create_date="2022-01-02T03:04:05"))
        assert tags["CreateDate"] == "2022-01-02T03:04:05"

    def test_image_without_metadata(self, png_bytes):
        assert "CreateDate" not in read_tags(png_bytes)
        assert "DateTimeOriginal" not in read_tags(png_bytes)

    def test_unreadable_container(self):
        with pytest.raises(MetadataReadError):
            read_tags(b"definitely not an image")


class TestParsing:

    def test_convert_exif_date(self):
        assert convert_exif_date("2021:07:04 18:30:00") == "2021-07-04T18:30:00"

    def test_parse_invalid(self):
        assert parse_date("2021:07:04 18:30:00") is None
        assert parse_date("2021-13-40T00:00:00") is None
        assert parse_date("") is None
        assert parse_date(None) is None

    def test_parse_aware_becomes_local(self):
        parsed = parse_date("2022-01-02T03:04:05Z")
        expected = datetime(2022, 1, 2, 3, 4, 5, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert parsed == expected
        assert parsed.tzinfo is None


class TestMetadataResolver:

    def test_create_date_wins(self):
        data = make_jpeg(date_time_original="2021:07:04 18:30:00", create_date="2022-01-02T03:04:05")
        date, source = MetadataResolver().resolve_with_source(data)
        assert date == datetime(2022, 1, 2, 3, 4, 5)
        assert source == "create_date"

    def test_malformed_create_date_falls_through(self):
        data = make_jpeg(date_time_original="2021:07:04 18:30:00", create_date="not a date")
        date, source = MetadataResolver().resolve_with_source(data)
        assert date == datetime(2021, 7, 4, 18, 30, 0)
        assert source == "date_time_original"

    def test_no_tags_defaults_to_now(self, jpeg_bytes):
        before = datetime.now()
        date, source = MetadataResolver().resolve_with_source(jpeg_bytes)
        assert before - timedelta(seconds=1) <= date <= datetime.now() + timedelta(seconds=1)
        assert source == "fallback"

    def test_malformed_original_defaults_to_clock(self):
        fixed = datetime(2000, 1, 1)
        resolver = MetadataResolver(clock=lambda: fixed)
        assert resolver.resolve(make_jpeg(date_time_original="0000:00:00 00:00:00")) == fixed

    def test_custom_tag_reader(self):
        resolver = MetadataResolver(tag_reader=lambda data: {"DateTimeOriginal": "2019:12:31 23:59:59"})
        assert resolver.resolve(b"") == datetime(2019, 12, 31, 23, 59, 59)

    def test_unreadable_raises(self):
        with pytest.raises(MetadataReadError):
            MetadataResolver().resolve(b"garbage")

    def test_resolve_or_now_recovers(self):
        fixed = datetime(2000, 1, 1)
        date, source = MetadataResolver(clock=lambda: fixed).resolve_or_now(b"garbage")
        assert date == fixed
        assert source == "fallback"
