#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from .data import Kind, Entry, Container, IconPlanes, Hotspot, EXTENSIONS, sniff
from .errors import (IconError, MalformedContainer, UnsupportedType, UnsupportedPayloadFormat, EmptyContainer,
                     InvalidPayloadSize, InvalidOffset, TruncatedStream, ArityMismatch, ImageTooLarge, RasterCodecError,
                     TooManyImages, InvalidHotspot)
from .bitmap import materialize, dematerialize, scanline_offsets
from .config import from_images, icon_config, cursor_config, check_hotspot
from .decode import parse_header, parse_entry, decode, decode_config
from .encode import encode

__version__     = "1.0"
__license__     = "MIT License"
__summary__     = "Windows `.ico` / `.cur` directory codec"
