#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import struct
from io import BytesIO

import pytest
from PIL import Image

from icondir import (encode, decode, decode_config, icon_config, cursor_config, Container, Entry, Kind, Hotspot,
                     ArityMismatch, EmptyContainer, ImageTooLarge, InvalidHotspot)


def gradient(width, height, alpha = True):
        image = Image.new('RGBA', (width, height))
        for y in range(height):
                for x in range(width):
                        image.putpixel((x, y), ((x * 7) % 256, (y * 11) % 256, (x + y) % 256, ((x * y) % 256 if alpha else 255)))
        return image

def write(container, images):
        stream = BytesIO()
        encode(stream, container, images)
        return stream.getvalue()

def records(data):
        count = struct.unpack_from('<H', data, 4)[0]
        return [struct.unpack_from('<4B2H2I', data, 6 + 16 * i) for i in range(count)]


def test_round_trip_rgba():
        images = [gradient(16, 16), gradient(32, 32), gradient(48, 20)]
        data = write(icon_config(images), images)
        container, decoded = decode(BytesIO(data))

        assert container.kind == Kind.ICON
        assert [(entry.width, entry.height) for entry in container] == [(16, 16), (32, 32), (48, 20)]
        for source, image in zip(images, decoded):
                assert image.tobytes() == source.tobytes()

def test_round_trip_rgb():
        image = gradient(9, 7, alpha = False).convert('RGB')
        _, decoded = decode(BytesIO(write(icon_config([image]), [image])))

        assert decoded[0].mode == 'RGBA'
        assert decoded[0].tobytes() == image.convert('RGBA').tobytes()

def test_round_trip_palette():
        image = Image.new('P', (6, 3))
        image.putpalette([0, 0, 0, 200, 10, 10, 10, 200, 10, 10, 10, 200])
        for x in range(6):
                image.putpixel((x, 1), x % 4)
        _, decoded = decode(BytesIO(write(icon_config([image]), [image])))

        assert decoded[0].tobytes() == image.convert('RGBA').tobytes()

def test_layout():
        images = [gradient(16, 16), gradient(8, 4)]
        data = write(icon_config(images), images)
        entries = records(data)

        assert struct.unpack_from('<3H', data, 0) == (0, 1, 2)
        assert entries[0][7] == 6 + 16 * 2
        assert entries[1][7] == entries[0][7] + entries[0][6]
        assert len(data) == entries[1][7] + entries[1][6]
        for (width, height, colors, reserved, planes, bpp, size, offset), image in zip(entries, images):
                assert (width, height) == image.size
                assert (colors, reserved) == (0, 0)
                ## Height doubled in the bitmap header.
                assert struct.unpack_from('<i', data, offset + 8)[0] == image.size[1] * 2
                assert struct.unpack_from('<I', data, offset)[0] == 40

def test_icon_planes_and_bits_overwritten():
        image = gradient(8, 8)
        container = Container(Kind.ICON, [Entry(8, 8, aux1 = 5, aux2 = 6)])
        data = write(container, [image])

        assert records(data)[0][4:6] == (1, 32)
        assert (container[0].aux1, container[0].aux2) == (1, 32)
        assert container[0].offset == 22
        assert container[0].size == records(data)[0][6]

def test_icon_bits_follow_mode():
        image = gradient(8, 8).convert('RGB')

        assert records(write(icon_config([image]), [image]))[0][4:6] == (1, 24)

def test_cursor_hotspots_kept():
        images = [gradient(16, 16), gradient(32, 32)]
        data = write(cursor_config(images, [1, 2, 17, 30]), images)

        assert struct.unpack_from('<H', data, 2)[0] == 2
        assert [entry[4:6] for entry in records(data)] == [(1, 2), (17, 30)]
        container, decoded = decode(BytesIO(data))
        assert container.hotspots == [Hotspot(1, 2), Hotspot(17, 30)]
        assert decoded[1].tobytes() == images[1].tobytes()

def test_256_written_as_zero():
        image = Image.new('RGBA', (256, 256), (10, 20, 30, 40))
        data = write(icon_config([image]), [image])

        assert records(data)[0][0:2] == (0, 0)
        container, decoded = decode(BytesIO(data))
        assert (container[0].width, container[0].height) == (256, 256)
        assert decoded[0].getpixel((255, 255)) == (10, 20, 30, 40)

def test_encode_at_stream_position():
        image = gradient(8, 8)
        stream = BytesIO()
        stream.write(b'prefix')
        encode(stream, icon_config([image]), [image])
        stream.seek(6)

        assert decode_config(stream)[0].offset == 22
        stream.seek(6)
        assert decode(stream)[1][0].tobytes() == image.tobytes()

def test_arity_mismatch():
        images = [gradient(8, 8), gradient(16, 16)]

        with pytest.raises(ArityMismatch):
                write(icon_config(images[:1]), images)

def test_empty_container():
        with pytest.raises(EmptyContainer):
                write(Container(Kind.ICON, []), [])

def test_image_too_large():
        container = Container(Kind.ICON, [Entry(16, 16), Entry(16, 16)])

        with pytest.raises(ImageTooLarge) as e:
                write(container, [gradient(16, 16), Image.new('RGBA', (300, 16))])
        assert e.value.index == 1

def test_image_size_wins(caplog):
        image = gradient(8, 4)
        container = Container(Kind.ICON, [Entry(16, 16)])
        data = write(container, [image])

        assert records(data)[0][0:2] == (8, 4)
        assert "image size used" in caplog.text

def test_nothing_written_on_failure():
        stream = BytesIO()
        with pytest.raises(ImageTooLarge):
                encode(stream, Container(Kind.ICON, [Entry(16, 16)]), [Image.new('RGBA', (16, 400))])
        assert stream.getvalue() == b''

def test_hotspot_out_of_range():
        stream = BytesIO()
        container = Container(Kind.CURSOR, [Entry(8, 8), Entry(8, 8, aux1 = 70000, aux2 = 1)])

        with pytest.raises(InvalidHotspot) as e:
                encode(stream, container, [gradient(8, 8), gradient(8, 8)])
        assert e.value.index == 1
        assert stream.getvalue() == b''
