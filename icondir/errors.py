#!/usr/bin/env python3
# -*- coding: utf-8 -*-

class IconError(Exception):
        """ Base icon / cursor exception. """
        def __init__(self, msg, **kwargs):
                super().__init__(msg)
                self.msg = msg
                self.index = kwargs.get('index')
                self.value = kwargs.get('value')

class MalformedContainer(IconError):
        """ A reserved field is not zero. """

class UnsupportedType(IconError):
        """ Header type is neither icon (1) nor cursor (2). """

class UnsupportedPayloadFormat(IconError):
        """ Entry payload is not an uncompressed bitmap (e.g. `png` compressed). """

class EmptyContainer(IconError):
        """ Header declares zero entries. """

class InvalidPayloadSize(IconError):
        """ Entry declares a zero byte payload. """

class InvalidOffset(IconError):
        """ Entry payload would start inside the directory. """

class TruncatedStream(IconError):
        """ Short read anywhere in the container or inside a payload. """

class ArityMismatch(IconError):
        """ Image count disagrees with entry count or hotspot count. """

class ImageTooLarge(IconError):
        """ Image width or height exceeds 256 pixels. """

class RasterCodecError(IconError):
        """ Pillow failed to decode / encode a bitmap stream. """

class TooManyImages(IconError):
        """ More than 65535 images for one directory. """

class InvalidHotspot(IconError):
        """ Cursor hotspot coordinate outside 0..65535. """
