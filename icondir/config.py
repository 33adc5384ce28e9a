#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from .data import MAX_SIZE, MAX_COUNT, MAX_HOTSPOT, Kind, Entry, Container
from .errors import ArityMismatch, ImageTooLarge, EmptyContainer, TooManyImages, InvalidHotspot

## _________________________
##| Directory configuration |-----------------------------------------------------------------------------------------------------------------------------
##|_________________________|
##

def check_count(count):
        """ Verifies that a directory can hold `count` images. """
        if count == 0:
                raise EmptyContainer("Input error: no images to put in the directory.", value = count)
        if count > MAX_COUNT:
                raise TooManyImages("Input error: %d images, a directory holds at most %d." %(count, MAX_COUNT), value = count)

def check_size(index, image):
        """ Verifies that an image fits in a directory entry. """
        width, height = image.size
        if width > MAX_SIZE or height > MAX_SIZE:
                raise ImageTooLarge("Image error: image %d is too large: %dx%d, cannot exceed %d." %(index, width, height, MAX_SIZE),
                                    index = index, value = (width, height))
        return width, height

def check_hotspot(index, x, y):
        """ Verifies that a cursor hotspot fits the two 16-bit entry fields. """
        for value in (x, y):
                if not 0 <= value <= MAX_HOTSPOT:
                        raise InvalidHotspot("Input error: hotspot (%s, %s) of image %d must be in 0..%d." %(x, y, index, MAX_HOTSPOT),
                                             index = index, value = (x, y))
        return x, y

def from_images(images, kind = Kind.ICON, hotspots = None):
        """ Builds the directory metadata of `images`.
            For cursors, `hotspots` is a flat list of x, y pairs: [x1, y1, x2, y2, ...].
        """
        check_count(len(images))
        if kind == Kind.CURSOR:
                hotspots = list(hotspots or [])
                if len(hotspots) != 2 * len(images):
                        raise ArityMismatch("Input error: hotspots must be twice the number of images (%d), got %d."
                                            %(len(images), len(hotspots)), value = len(hotspots))

        entries = []
        for indx, image in enumerate(images):
                width, height = check_size(indx, image)
                if kind == Kind.CURSOR:
                        x, y = check_hotspot(indx, hotspots[2 * indx], hotspots[2 * indx + 1])
                        entries.append(Entry(width, height, aux1 = x, aux2 = y))
                else:
                        entries.append(Entry(width, height))

        return Container(kind, entries)

def icon_config(images):
        """ Builds `.ico` metadata. """
        return from_images(images, Kind.ICON)

def cursor_config(images, hotspots):
        """ Builds `.cur` metadata. """
        return from_images(images, Kind.CURSOR, hotspots)
