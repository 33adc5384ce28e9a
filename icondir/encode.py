#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
from struct import pack

from .bitmap import dematerialize
from .config import check_count, check_size, check_hotspot
from .data import HEADER_FMT, ENTRY_FMT, Kind, min_offset
from .errors import IconError, ArityMismatch, UnsupportedType

## ________________________
##| Write `.ico` / `.cur`  |---------------------------------------------------------------------------------------------------------------------------------
##|________________________|
##

def header_icondir(kind, count):
        """ Defines the ICONDIR header. """
        ## (2bytes)idReserved (always 0) - (2bytes)idType (ico=1, cur=2) - (2bytes)idCount.
        return pack(HEADER_FMT, 0, kind, count)

def header_icondirentry(entry):
        """ Defines an ICONDIRENTRY record. """
        ## Define correct dimension, 0 means 256.
        return pack(ENTRY_FMT, entry.width % 256, entry.height % 256, entry.colors, 0,
                    entry.aux1, entry.aux2, entry.size, entry.offset)


class Encode(object):

        def __init__(self, stream, container, images):
                """
                    `stream`    : a seekable binary file object, written from its current position.
                    `container` : the directory metadata (see `icondir.config`), updated in place
                                  with sizes, offsets and (for `.ico`) planes / bit count.
                    `images`    : a list of PIL images, one per entry.
                """
                self.stream = stream
                self.container = container
                self.images = images
                self.logger = logging.getLogger('icondir')

        def check(self):
                """ Verifies that metadata and images agree. """
                if self.container.kind not in list(Kind):
                        raise UnsupportedType("Icon/Cursor error: invalid type %s." %self.container.kind, value = self.container.kind)
                check_count(self.container.count)
                if len(self.images) != self.container.count:
                        raise ArityMismatch("Input error: expected %d images, got %d." %(self.container.count, len(self.images)),
                                            value = len(self.images))

        def payload(self, index, entry, image):
                """ Creates payload of an entry and fixes its record. """
                width, height = check_size(index, image)
                if self.container.kind == Kind.CURSOR:
                        check_hotspot(index, entry.aux1, entry.aux2)
                if (entry.width, entry.height) != (width, height):
                        self.logger.warning("Entry %d declares %dx%d, image is %dx%d: image size used.",
                                            index, entry.width, entry.height, width, height)
                        entry.width, entry.height = width, height

                try:
                        icobytes, planes, bpp = dematerialize(image)
                except IconError as e:
                        if e.index is None:
                                e.index = index
                        raise

                if self.container.kind == Kind.ICON:
                        entry.aux1, entry.aux2 = planes, bpp
                entry.size = len(icobytes)
                return icobytes

        def work(self):
                """ Executes encoding job. """
                self.check()
                base = self.stream.tell()
                count = self.container.count

                ## Size of all the headers (image headers + file header).
                offset = min_offset(count)
                payloads = []
                for indx, (entry, image) in enumerate(zip(self.container.entries, self.images)):
                        payloads.append(self.payload(indx, entry, image))
                        entry.offset = offset
                        offset += entry.size

                self.stream.write(header_icondir(self.container.kind, count))
                for indx, entry in enumerate(self.container.entries):
                        self.logger.debug("Entry %d: %r", indx, entry)
                        self.stream.write(header_icondirentry(entry))

                for entry, icobytes in zip(self.container.entries, payloads):
                        self.stream.seek(base + entry.offset)
                        self.stream.write(icobytes)


def encode(stream, container, images):
        """ Writes a `.ico` / `.cur` built from `container` metadata and `images`. """
        Encode(stream, container, images).work()
