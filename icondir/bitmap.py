#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import logging
from io import BytesIO
from struct import unpack_from, pack, pack_into

from PIL import Image

from .data import (FILE_HEADER_FMT, FILE_HEADER_LEN, INFO_HEADER_FMT, INFO_HEADER_LEN, PNG_SIGNATURE, BMP_SIGNATURE,
                   BI_RGB, BI_BITFIELDS, BI_JPEG, BI_PNG, calc_rowsize)
from .errors import TruncatedStream, UnsupportedPayloadFormat, RasterCodecError

logger = logging.getLogger('icondir')

## Modes Pillow can store as `bmp` without conversion.
BMP_MODES = ('1', 'L', 'P', 'RGB', 'RGBA')

## ______________
##| Raster codec |------------------------------------------------------------------------------------------------------------------------------------------
##|______________|
##

def decode_bitmap_stream(data):
        """ Gets image from a complete `bmp` stream (file header included). """
        try:
                image = Image.open(BytesIO(data), formats = ['BMP'])
                image.load()
        except Exception as e:
                raise RasterCodecError("Image error: cannot decode bitmap (%s)." %e) from e
        return image

def encode_bitmap_stream(image):
        """ Gets a complete `bmp` stream (file header included) from image. """
        imagebyte = BytesIO()
        try:
                image.save(imagebyte, format = 'BMP')
        except Exception as e:
                raise RasterCodecError("Image error: cannot encode mode '%s' as bitmap (%s)." %(image.mode, e)) from e
        return imagebyte.getvalue()


## _________________
##| Bitmap helpers  |-------------------------------------------------------------------------------------------------------------------------------------
##|_________________|
##

def read_info(dataimage):
        """ Gets BITMAPINFO header parameters. """
        # Should be:
        # biSize is the size of the header
        # biHeight doubled respect bHeight
        # biPlanes = 1
        # biCompression = 0 (if BI_RGB)
        # biSizeImage = size of the XOR mask + AND mask (can be also 0)
        if len(dataimage) < INFO_HEADER_LEN:
                raise TruncatedStream("Image error: bitmap header truncated, got %d bytes." %len(dataimage), value = len(dataimage))

        (biSize, biWidth, biHeight, biPlanes, biBitCount,
        biCompression, biSizeImage, _, _, biClrUsed, _) = unpack_from(INFO_HEADER_FMT, dataimage, 0)

        return {"head"     : biSize,
                "width"    : biWidth,
                "height"   : biHeight,
                "planes"   : biPlanes,
                "bpp"      : biBitCount,
                "compress" : biCompression,
                "size_img" : biSizeImage,
                "colors"   : biClrUsed}

def check_payload(payload):
        """ Verifies that an entry payload is an uncompressed bitmap and gets its parameters. """
        if payload.startswith(PNG_SIGNATURE):
                raise UnsupportedPayloadFormat("Image error: `png` compressed payload not supported.", value = 'png')

        info = read_info(payload)
        if info['head'] < INFO_HEADER_LEN:
                raise UnsupportedPayloadFormat("Image error: bitmap header of %d bytes not supported." %info['head'], value = info['head'])
        if info['compress'] in (BI_JPEG, BI_PNG):
                raise UnsupportedPayloadFormat("Image error: compressed bitmap (%d) not supported." %info['compress'], value = info['compress'])
        if info['width'] <= 0:
                raise UnsupportedPayloadFormat("Image error: malformed bitmap width %d." %info['width'], value = info['width'])
        if len(payload) < info['head']:
                raise TruncatedStream("Image error: bitmap header declares %d bytes, payload has %d." %(info['head'], len(payload)),
                                      value = len(payload))
        return info

def pixel_offset(info):
        """ Offset of the pixel data, counted from the start of the info header. """
        offset = info['head']
        ## 40 bytes headers keep the three channel masks outside.
        if info['compress'] == BI_BITFIELDS and info['head'] == INFO_HEADER_LEN:
                offset += 12
        if info['bpp'] <= 8:
                offset += (info['colors'] or 1 << info['bpp']) * 4
        return offset

def scanline_offsets(height, stride):
        """ Yields, from the top image row down, the offset of each row inside the pixel data.
            A positive height means rows are stored bottom-up, a negative one top-down.
        """
        rows = abs(height)
        for y in range(rows):
                yield (y if height < 0 else rows - 1 - y) * stride

def alpha_from_bgra(xordata, width, height):
        """ Gets alpha channel (top-down) from 32-bit BGRA image data. """
        alpha = bytearray()
        for start in scanline_offsets(height, calc_rowsize(32, width)):
                alpha += xordata[start + 3 : start + width * 4 : 4]
        return bytes(alpha)

def alpha_from_mask(anddata, width, height):
        """ Gets alpha channel (top-down) from AND mask, bit set means transparent. """
        alpha = bytearray()
        stride = calc_rowsize(1, width)
        for start in scanline_offsets(height, stride):
                row = anddata[start : start + stride]
                alpha += bytes(0 if row[x // 8] & (0x80 >> (x % 8)) else 255 for x in range(width))
        return bytes(alpha)

def compute_and_mask(width, height, xordata):
        """ Computes AND mask from 32-bit BGRA image data, rows kept in stored order. """
        andbytes = bytearray()
        stride = calc_rowsize(1, width)
        for y in range(height):
                row = bytearray(stride)
                for x in range(width):
                        if xordata[(y * width + x) * 4 + 3] == 0:
                                row[x // 8] |= 0x80 >> (x % 8)
                andbytes += row
        return bytes(andbytes)


## ____________________
##| Entry <--> bitmap  |----------------------------------------------------------------------------------------------------------------------------------
##|____________________|
##

def materialize(payload, declared_height, alpha_bpp = None):
        """ Turns an entry payload (BITMAPINFO header + pixel data, no file header) into a RGBA image.

            `declared_height` : the entry height (1..256); it replaces the doubled height
                                stored in the bitmap header.
            `alpha_bpp`       : bits per pixel claimed by the directory; when `None` the
                                bitmap header value is used. 32-bit frames get their alpha
                                channel back from the raw BGRA data, the others from the AND mask.
        """
        info = check_payload(payload)
        width, height = info['width'], declared_height
        top_down = info['height'] < 0
        offset = pixel_offset(info)
        if offset > len(payload):
                raise TruncatedStream("Image error: pixel data starts at %d, payload has %d bytes." %(offset, len(payload)),
                                      value = len(payload))

        dataimage = bytearray(payload)
        pack_into('<i', dataimage, 8, -height if top_down else height)

        xorsize = None
        if info['compress'] in (BI_RGB, BI_BITFIELDS):
                xorsize = calc_rowsize(info['bpp'], width) * height
                if len(dataimage) < offset + xorsize:
                        raise TruncatedStream("Image error: pixel data truncated, expected %d bytes, got %d." %(offset + xorsize, len(dataimage)),
                                              value = len(dataimage))

        header = pack(FILE_HEADER_FMT, BMP_SIGNATURE, len(dataimage) + FILE_HEADER_LEN, 0, 0, FILE_HEADER_LEN + offset)
        image = decode_bitmap_stream(header + bytes(dataimage)).convert('RGBA')

        if xorsize is None:
                return image

        rows = -height if top_down else height
        bits = info['bpp'] if alpha_bpp is None else alpha_bpp
        if bits == 32 and info['bpp'] == 32:
                ## Pillow reads BI_RGB 32-bit as BGRX, put back the alpha.
                alpha = alpha_from_bgra(dataimage[offset : offset + xorsize], width, rows)
                image.putalpha(Image.frombytes('L', image.size, alpha))
        else:
                andsize = calc_rowsize(1, width) * height
                anddata = dataimage[offset + xorsize : offset + xorsize + andsize]
                if len(anddata) == andsize:
                        image.putalpha(Image.frombytes('L', image.size, alpha_from_mask(anddata, width, rows)))
                else:
                        logger.debug("AND mask missing (%d of %d bytes), frame kept opaque.", len(anddata), andsize)

        return image

def dematerialize(image):
        """ Turns an image into an entry payload.
            Returns (payload, color planes, bits per pixel).
        """
        if image.mode not in BMP_MODES or 'transparency' in image.info:
                image = image.convert('RGBA')
        width, height = image.size

        stream = encode_bitmap_stream(image)
        offset = unpack_from('<I', stream, 10)[0] - FILE_HEADER_LEN
        dataimage = bytearray(stream[FILE_HEADER_LEN:])
        info = read_info(dataimage)
        xorsize = calc_rowsize(info['bpp'], width) * height

        ## Keep color count explicit, the decoder finds the pixels with it.
        if info['bpp'] <= 8:
                pack_into('<I', dataimage, 32, (offset - info['head']) // 4)

        ## Write AND mask.
        if info['bpp'] == 32:
                anddata = compute_and_mask(width, height, dataimage[offset : offset + xorsize])
        else:
                anddata = bytes(calc_rowsize(1, width) * height)

        # include the mask height
        pack_into('<i', dataimage, 8, height * 2)
        pack_into('<I', dataimage, 20, xorsize + len(anddata))

        return bytes(dataimage[: offset + xorsize]) + anddata, 1, info['bpp']
