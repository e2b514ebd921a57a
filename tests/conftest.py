"""Shared fixtures: in-memory images with EXIF/XMP metadata."""

import struct
from datetime import datetime
from io import BytesIO

import piexif
import pytest
from PIL import Image

from photo_reminisce.models import Photo

XMP_HEADER = b"http://ns.adobe.com/xap/1.0/\x00"


def xmp_packet(create_date: str) -> bytes:
    return (
        '<x:xmpmeta xmlns:x="adobe:ns:meta/">'
        '<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">'
        '<rdf:Description xmlns:xmp="http://ns.adobe.com/xap/1.0/" '
        f'xmp:CreateDate="{create_date}"/>'
        '</rdf:RDF></x:xmpmeta>'
    ).encode("utf-8")


def make_jpeg(width=640, height=480, color=(40, 90, 160), date_time_original=None, create_date=None):
    """Encode a solid JPEG, optionally with DateTimeOriginal (EXIF) and CreateDate (XMP)"""
    image = Image.new("RGB", (width, height), color)
    kwargs = {"quality": 95}
    if date_time_original is not None:
        exif = {"0th": {}, "Exif": {piexif.ExifIFD.DateTimeOriginal: date_time_original.encode()}}
        kwargs["exif"] = piexif.dump(exif)

    buffer = BytesIO()
    image.save(buffer, "JPEG", **kwargs)
    data = buffer.getvalue()

    if create_date is not None:
        payload = XMP_HEADER + xmp_packet(create_date)
        segment = b"\xff\xe1" + struct.pack(">H", len(payload) + 2) + payload
        data = data[:2] + segment + data[2:]
    return data


def make_png(width=320, height=240, color=(200, 200, 200)):
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, "PNG")
    return buffer.getvalue()


@pytest.fixture
def jpeg_bytes():
    return make_jpeg()


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def make_photo():
    def _make(filename="IMG_0001.jpg", width=640, height=480, date=datetime(2024, 3, 5, 14, 7, 9)):
        return Photo(
            data=make_jpeg(width, height),
            filename=filename,
            media_type="image/jpeg",
            width=width,
            height=height,
            capture_date=date,
            date_source="date_time_original",
        )
    return _make


class MemorySink:
    """Collects saves in memory"""

    def __init__(self, fail_on=(), error: Exception | None = None):
        self.files: dict[str, bytes] = {}
        self.fail_on = set(fail_on)
        self.error = error or OSError("disk full")

    def save(self, data: bytes, filename: str) -> None:
        if filename in self.fail_on:
            raise self.error
        self.files[filename] = data


@pytest.fixture
def memory_sink():
    return MemorySink()
