#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import struct

import pytest


def rowsize(bits, width):
        return ((bits * width + 31) // 32) * 4

def favicon_pixel(x, y):
        """ (r, g, b, a) of the sample frames, `y` counted from the top. """
        return ((x * 5) % 256, (y * 5) % 256, 100, (y * 5 + 3) % 256)

def bgra_payload(width, height, pixel = favicon_pixel, top_down = False, with_mask = True, header_height = None):
        """ 32-bit BITMAPINFO header + BGRA rows (+ empty AND mask). """
        rows = []
        for y in range(height):
                rows.append(b"".join(bytes((b, g, r, a)) for r, g, b, a in (pixel(x, y) for x in range(width))))
        if not top_down:
                rows.reverse()
        xordata = b"".join(rows)
        anddata = (bytes(rowsize(1, width) * height) if with_mask else b"")
        if header_height is None:
                header_height = (-2 if top_down else 2) * height
        header = struct.pack('<I2i2H2I2i2I', 40, width, header_height, 1, 32, 0, len(xordata) + len(anddata), 0, 0, 0, 0)
        return header + xordata + anddata

def rgb_payload(width, height, pixel, mask_rows = None):
        """ 24-bit BITMAPINFO header + BGR rows (bottom-up) + AND mask rows (given top-down). """
        stride = rowsize(24, width)
        rows = []
        for y in range(height):
                row = b"".join(bytes((b, g, r)) for r, g, b in (pixel(x, y) for x in range(width)))
                rows.append(row + bytes(stride - len(row)))
        xordata = b"".join(reversed(rows))
        anddata = (b"".join(reversed(mask_rows)) if mask_rows is not None else b"")
        header = struct.pack('<I2i2H2I2i2I', 40, width, 2 * height, 1, 24, 0, len(xordata) + len(anddata), 0, 0, 0, 0)
        return header + xordata + anddata

def container_bytes(kind, frames, reserved = 0):
        """ `frames` items: (width byte, height byte, colors, aux1, aux2, payload). """
        count = len(frames)
        head = struct.pack('<3H', reserved, kind, count)
        offset = 6 + 16 * count
        data = b""
        for width, height, colors, aux1, aux2, payload in frames:
                head += struct.pack('<4B2H2I', width, height, colors, 0, aux1, aux2, len(payload), offset)
                offset += len(payload)
                data += payload
        return head + data

def single_entry(width = 16, height = 16, colors = 0, reserved = 0, aux1 = 1, aux2 = 32, size = 10, offset = 22, kind = 1, count = 1):
        """ Raw header + one entry record, no payload. """
        return struct.pack('<3H', 0, kind, count) + struct.pack('<4B2H2I', width, height, colors, reserved, aux1, aux2, size, offset)


@pytest.fixture
def favicon():
        """ 3 frames icon: 16x16, 32x32, 48x48, 32-bit, color count 0. """
        return container_bytes(1, [(size, size, 0, 1, 32, bgra_payload(size, size)) for size in (16, 32, 48)])
