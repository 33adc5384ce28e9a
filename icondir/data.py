#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from collections import namedtuple
from enum import IntEnum

from .errors import UnsupportedType

## ___________
##| Constants |---------------------------------------------------------------------------------------------------------------------------------------------
##|___________|
##

## ICONDIR: (2bytes)idReserved - (2bytes)idType - (2bytes)idCount.
HEADER_FMT = '<3H'
HEADER_LEN = 6
## ICONDIRENTRY: (1byte)bWidth - (1byte)bHeight - (1byte)bColorCount - (1byte)bReserved -
## - (2bytes)wPlanes_or_wXHotSpot - (2bytes)wBitCount_or_wYHotSpot - (4bytes)dwBytesInRes - (4bytes)dwImageOffset.
ENTRY_FMT = '<4B2H2I'
ENTRY_LEN = 16
## BITMAPFILEHEADER: (2bytes)bfType - (4bytes)bfSize - (2bytes)bfReserved1 - (2bytes)bfReserved2 - (4bytes)bfOffBits.
FILE_HEADER_FMT = '<2sI2HI'
FILE_HEADER_LEN = 14
## BITMAPINFOHEADER.
INFO_HEADER_FMT = '<I2i2H2I2i2I'
INFO_HEADER_LEN = 40

MAX_SIZE = 256
MAX_COUNT = 0xFFFF
MAX_HOTSPOT = 0xFFFF
PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'
BMP_SIGNATURE = b'BM'

## biCompression values.
BI_RGB, BI_RLE8, BI_RLE4, BI_BITFIELDS, BI_JPEG, BI_PNG = range(6)


class Kind(IntEnum):
        ICON = 1
        CURSOR = 2

EXTENSIONS = {Kind.ICON   : '.ico',
              Kind.CURSOR : '.cur'}

## Meaning of the two 16-bit entry fields, selected by container kind.
IconPlanes = namedtuple('IconPlanes', ['planes', 'bpp'])
Hotspot = namedtuple('Hotspot', ['x', 'y'])


def calc_rowsize(bits, width):
        """ Computes number of bytes per row in a image (stride). """
        ## The size of each row is rounded up to the nearest multiple of 4 bytes.
        return ((bits * width + 31) // 32) * 4

def min_offset(count):
        """ Lowest payload offset possible for a directory of `count` entries. """
        return HEADER_LEN + ENTRY_LEN * count

def sniff(data):
        """ Determines whether a sequence of bytes starts like an `.ico` / `.cur`. """
        if data[0:4] == b'\x00\x00\x01\x00':
                return Kind.ICON
        elif data[0:4] == b'\x00\x00\x02\x00':
                return Kind.CURSOR
        return None


## _________________
##| Data structures |---------------------------------------------------------------------------------------------------------------------------------------
##|_________________|
##

class Entry(object):
        """ One directory record (width and height are logical, 1..256),
            plus the image once it is materialized.
        """
        def __init__(self, width, height, colors = 0, aux1 = 0, aux2 = 0, size = 0, offset = 0, image = None):
                self.width, self.height = width, height
                self.colors = colors
                self.aux1, self.aux2 = aux1, aux2
                self.size, self.offset = size, offset
                self.image = image

        @property
        def area(self):
                return self.width * self.height

        def __repr__(self):
                return "Entry(%dx%d, colors=%d, aux=(%d, %d), size=%d, offset=%d)" %(self.width, self.height, self.colors,
                                                                                      self.aux1, self.aux2, self.size, self.offset)


class Container(object):
        """ A decoded or to-be-encoded `.ico` / `.cur`. """
        def __init__(self, kind, entries):
                if kind not in list(Kind):
                        raise UnsupportedType("Icon/Cursor error: invalid type %s, expected 1 (ICO) or 2 (CUR)." %kind, value = kind)
                self.kind = Kind(kind)
                self.entries = list(entries)

        @property
        def count(self):
                return len(self.entries)

        @property
        def largest(self):
                """ Index of the entry with the biggest area (first one wins on ties). """
                largest = 0
                for indx, entry in enumerate(self.entries):
                        if entry.area > self.entries[largest].area:
                                largest = indx
                return largest

        @property
        def images(self):
                return [entry.image for entry in self.entries]

        @property
        def hotspots(self):
                """ Hotspots of a cursor, in entry order. """
                if self.kind != Kind.CURSOR:
                        return []
                return [Hotspot(entry.aux1, entry.aux2) for entry in self.entries]

        def aux(self, index):
                """ Interprets the entry's two 16-bit fields according to the kind. """
                entry = self.entries[index]
                if self.kind == Kind.CURSOR:
                        return Hotspot(entry.aux1, entry.aux2)
                return IconPlanes(entry.aux1, entry.aux2)

        def __len__(self):
                return len(self.entries)

        def __getitem__(self, key):
                return self.entries[key]

        def __iter__(self):
                return iter(self.entries)

        def __repr__(self):
                return "Container(%s, count=%d, largest=%d)" %(self.kind.name, self.count, self.largest)
