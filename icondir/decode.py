#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
from struct import unpack

from .bitmap import materialize
from .data import HEADER_FMT, HEADER_LEN, ENTRY_FMT, ENTRY_LEN, Kind, Entry, Container, min_offset
from .errors import (IconError, MalformedContainer, UnsupportedType, EmptyContainer, InvalidPayloadSize,
                     InvalidOffset, TruncatedStream)

## _______________________
##| Read `.ico` / `.cur`  |----------------------------------------------------------------------------------------------------------------------------------
##|_______________________|
##

def read_exact(stream, size, what):
        """ Reads exactly `size` bytes or fails. """
        data = stream.read(size)
        if len(data) != size:
                raise TruncatedStream("Icon/Cursor error: unexpected EOF reading %s, expected %d bytes, got %d." %(what, size, len(data)),
                                      value = len(data))
        return data

def parse_header(stream):
        """ Reads the ICONDIR header, returns (kind, count). """
        reserved, identf, count = unpack(HEADER_FMT, read_exact(stream, HEADER_LEN, 'header'))

        if reserved != 0:
                raise MalformedContainer("Icon/Cursor error: reserved header field is %d, expected 0." %reserved, value = reserved)
        if identf not in list(Kind):
                raise UnsupportedType("Icon/Cursor error: invalid type %d, expected 1 (ICO) or 2 (CUR)." %identf, value = identf)
        if count == 0:
                raise EmptyContainer("Icon/Cursor error: no images declared.", value = count)

        return Kind(identf), count

def parse_entry(stream, count, index = 0):
        """ Reads one ICONDIRENTRY record of a directory holding `count` entries. """
        # Should be:
        # wPlanes = 0 or 1, wBitCount = 0 (if not used) for `.ico`
        # dwBytesInRes is the total number of bytes in the image data, including palette data
        # dwImageOffset is offset from the beginning of the file to the image data
        bWidth, bHeight, bColorCount, bReserved, \
                wPlanes_or_wXHotSpot, wBitCount_or_wYHotSpot, dwBytesInRes, dwImageOffset = unpack(ENTRY_FMT,
                                                                                                   read_exact(stream, ENTRY_LEN, 'entry %d' %index))
        if bReserved != 0:
                raise MalformedContainer("Image error: entry %d reserved byte is %d, expected 0." %(index, bReserved),
                                         index = index, value = bReserved)
        if dwBytesInRes == 0:
                raise InvalidPayloadSize("Image error: entry %d declares an empty payload." %index, index = index, value = dwBytesInRes)
        if dwImageOffset < min_offset(count):
                raise InvalidOffset("Image error: entry %d offset %d is inside the directory (minimum %d)." %(index, dwImageOffset, min_offset(count)),
                                    index = index, value = dwImageOffset)

        ## 0 means 256.
        return Entry(bWidth or 256, bHeight or 256, bColorCount,
                     wPlanes_or_wXHotSpot, wBitCount_or_wYHotSpot, dwBytesInRes, dwImageOffset)


class Decode(object):

        def __init__(self, stream, full = True):
                """
                    `stream` : a seekable binary file object positioned at the start of the `.ico` / `.cur`.
                    `full`   : if 'False', only the directory is read (no image materialized).
                """
                self.stream = stream
                self.full = full
                self.logger = logging.getLogger('icondir')

        def load(self, base, index, entry):
                """ Gets image of an entry from its payload. """
                ## Directory bit count is meaningful only for icons (and may be 0).
                alpha_bpp = ((entry.aux2 or None) if self.kind == Kind.ICON else None)
                self.stream.seek(base + entry.offset)
                try:
                        payload = read_exact(self.stream, entry.size, "entry %d payload" %index)
                        return materialize(payload, entry.height, alpha_bpp)
                except IconError as e:
                        if e.index is None:
                                e.index = index
                        raise

        def work(self):
                """ Executes decoding job. """
                base = self.stream.tell()
                self.kind, count = parse_header(self.stream)
                self.logger.debug("Header: type %s, %d entries.", self.kind.name, count)

                entries = []
                for indx in range(count):
                        entry = parse_entry(self.stream, count, indx)
                        self.logger.debug("Entry %d: %r", indx, entry)
                        entries.append(entry)

                if self.full:
                        for indx, entry in enumerate(entries):
                                entry.image = self.load(base, indx, entry)

                ## Planes / bit count are already implied by the decoded pixels.
                if self.kind == Kind.ICON:
                        for entry in entries:
                                entry.aux1, entry.aux2 = 0, 0

                return Container(self.kind, entries)


def decode(stream):
        """ Reads a `.ico` / `.cur`, returns (container, images). """
        container = Decode(stream).work()
        return container, container.images

def decode_config(stream):
        """ Reads only the directory of a `.ico` / `.cur`. """
        return Decode(stream, full = False).work()
