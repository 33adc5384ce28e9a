#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import sys
import logging
import argparse
from io import BytesIO
from os import listdir, makedirs, remove
from os.path import isfile, isdir, exists, join, splitext, basename, abspath

from PIL import Image, ImageCms

from . import __version__, __summary__
from .config import from_images
from .data import Kind, EXTENSIONS, sniff
from .decode import decode, decode_config
from .encode import encode
from .errors import IconError

## ________
##| Parser |------------------------------------------------------------------------------------------------------------------------------------------------
##|________|
##

class ExtendAction(argparse.Action):
        def __call__(self, parser, namespace, values, option_string = None):
                items = getattr(namespace, self.dest) or []
                items.extend(values)
                setattr(namespace, self.dest, items)

def icondir_parser():
        """ CLI parser. """
        icon_parser = argparse.ArgumentParser(prog = 'icondir', description = __summary__, epilog = 'version: ' + __version__)
        icon_parser.add_argument('-v', '--verbose', action = 'store_true', default = False,
                                 dest = "verbose",
                                 help = "Show directory parsing details.")
        icon_parser.add_argument('-l', '--log', action = 'store', default = None, type = str,
                                 dest = "log",
                                 help = "Path of a log file (recreated on every run).")
        icon_subparsers = icon_parser.add_subparsers(dest = 'mode', help = "Select if you want to inspect, read or write an `.ico` / `.cur`.")

        # Info parser.
        info_parser = icon_subparsers.add_parser('info', allow_abbrev = False)
        info_parser.register('action', 'extend', ExtendAction)
        info_parser.add_argument('paths_icocurs', nargs = "+", action = "extend", default = [], type = str,
                                 help = "Path(s) of `.ico` / `.cur` file(s) or folder(s) to inspect.")

        # Decode parser.
        dec_parser = icon_subparsers.add_parser('decode', allow_abbrev = False)
        dec_parser.register('action', 'extend', ExtendAction)
        dec_parser.add_argument('-i', '--icocurs-paths', required = True, nargs = "+", action = "extend", default = [], type = str,
                                dest = "paths_icocurs",
                                help = "Path(s) of `.ico` / `.cur` file(s) or folder(s) to be decoded.")
        dec_parser.add_argument('-o', '--image-path', action = "store", default = abspath('.'), type = str,
                                dest = "path_image",
                                help = "Folder of the decoded image(s). Default is your working directory.")
        dec_parser.add_argument('-f', '--image-format', action = "store", default = '.png', type = str,
                                dest = "format_image",
                                help = "Format of the decoded image(s). Default is `.png`.")

        # Encode parser.
        enc_parser = icon_subparsers.add_parser('encode', allow_abbrev = False)
        enc_parser.register('action', 'extend', ExtendAction)
        enc_parser.add_argument('-i', '--images-paths', required = True, nargs = "+", action = "extend", default = [], type = str,
                                dest = "paths_images",
                                help = "Path(s) of image file(s) or folder(s) to be encoded, one entry each.")
        enc_parser.add_argument('-o', '--icocur-path', required = True, action = "store", type = str,
                                dest = "path_icocur",
                                help = "Path of the `.ico` / `.cur` encoded.")
        enc_parser.add_argument('-s', '--hotspots', nargs = "+", action = "extend", default = [], type = int,
                                dest = "hotspots",
                                help = "Cursor hotspots as x y pairs, one pair per image (forces `.cur`).")

        return icon_parser


## _________
##| Helpers |-----------------------------------------------------------------------------------------------------------------------------------------------
##|_________|
##

def create_log(options):
        """ Setups console (and eventually file) logging. """
        logger = logging.getLogger('icondir')
        for handler in list(logger.handlers):
                logger.removeHandler(handler)
                handler.close()

        formatter = logging.Formatter('%(message)s')
        ## Reports on stdout, warnings and errors on stderr.
        streamhandler = logging.StreamHandler(sys.stdout)
        streamhandler.setFormatter(formatter)
        streamhandler.addFilter(lambda record: record.levelno < logging.WARNING)
        logger.addHandler(streamhandler)
        errhandler = logging.StreamHandler(sys.stderr)
        errhandler.setFormatter(formatter)
        errhandler.setLevel(logging.WARNING)
        logger.addHandler(errhandler)

        if options.get('log'):
                if exists(options['log']):
                        remove(options['log'])
                filehandler = logging.FileHandler(options['log'], mode = 'a')
                filehandler.setFormatter(formatter)
                logger.addHandler(filehandler)

        logger.setLevel(logging.DEBUG if options.get('verbose') else logging.INFO)
        return logger

def expand(paths):
        """ Gets files from a list of file / folder paths. """
        files = []
        for path in paths:
                if isdir(path):
                        files.extend(join(path, file) for file in sorted(listdir(path)) if isfile(join(path, file)))
                else:
                        files.append(path)
        return files

def load_image(path):
        """ Opens an image, converting an embedded ICC profile to sRGB. """
        image = Image.open(path)
        image.load()
        if 'icc_profile' in image.info:
                icc = ImageCms.ImageCmsProfile(BytesIO(image.info.get('icc_profile')))
                srgb = ImageCms.createProfile('sRGB')
                image = ImageCms.profileToProfile(image, icc, srgb, outputMode = ('RGBA' if 'A' in image.getbands() else 'RGB'))
        return image


## ____________________
##| Process functions  |-------------------------------------------------------------------------------------------------------------------------------------
##|____________________|
##

class Process(object):
        def __init__(self, options):
                self.options = options
                self.logger = logging.getLogger('icondir')
                self.failed = 0

        def abort(self, path, msg):
                """ Reports a failed input and goes on. """
                self.logger.error("%s: %s" %(path, msg))
                self.failed += 1

        def read(self, path):
                """ Gets `.ico` / `.cur` file data, checking its magic. """
                with open(path, 'rb') as file:
                        data = file.read()
                if sniff(data) is None:
                        raise IconError("Input error: not an `.ico` / `.cur` file.")
                return BytesIO(data)

        def check_extension(self, path, kind):
                """ Warns about `.ico` / `.cur` extension not matching the header type. """
                ext = splitext(path)[1].lower()
                if kind == Kind.ICON and ext == '.cur':
                        self.logger.warning("%s: not a real `.cur` ! It's an icon with extension `.cur`." %path)
                elif kind == Kind.CURSOR and ext == '.ico':
                        self.logger.warning("%s: not a real `.ico` ! It's a cursor with extension `.ico`." %path)

        def info(self):
                """ Prints directory of `.ico` / `.cur` file(s). """
                for path in expand(self.options['paths_icocurs']):
                        try:
                                container = decode_config(self.read(path))
                        except (IconError, OSError) as e:
                                self.abort(path, e)
                                continue

                        self.check_extension(path, container.kind)
                        self.logger.info("file = %s" %path)
                        self.logger.info("type = %s, count = %d, largest = %d" %(container.kind.name, container.count, container.largest))
                        for indx, entry in enumerate(container):
                                line = "** image_%d ** (width, height) = (%d, %d), colors = %d, size = %d, offset = %d" \
                                       %(indx, entry.width, entry.height, entry.colors, entry.size, entry.offset)
                                if container.kind == Kind.CURSOR:
                                        line += ", (hotspot_x, hotspot_y) = %s" %str(tuple(container.aux(indx)))
                                self.logger.info(line)

        def decode(self):
                """ Saves every frame of `.ico` / `.cur` file(s). """
                makedirs(self.options['path_image'], exist_ok = True)
                frmt = self.options['format_image']
                for path in expand(self.options['paths_icocurs']):
                        try:
                                container, images = decode(self.read(path))
                        except (IconError, OSError) as e:
                                self.abort(path, e)
                                continue

                        self.check_extension(path, container.kind)
                        name = splitext(basename(path))[0]
                        for indx, image in enumerate(images):
                                save_path = join(self.options['path_image'], "%s_%d%s" %(name, indx, frmt))
                                try:
                                        image.save(save_path, format = frmt[1:].upper())
                                except (OSError, KeyError, ValueError) as e:
                                        self.abort(save_path, e)
                                        continue
                                self.logger.info("saved as = %s" %save_path)

        def encode(self):
                """ Builds one `.ico` / `.cur` from image file(s). """
                path = self.options['path_icocur']
                hotspots = self.options['hotspots']
                kind = (Kind.CURSOR if hotspots or path.lower().endswith(EXTENSIONS[Kind.CURSOR]) else Kind.ICON)

                try:
                        images = [load_image(imapath) for imapath in expand(self.options['paths_images'])]
                        if kind == Kind.CURSOR and not hotspots:
                                hotspots = [0, 0] * len(images)
                        container = from_images(images, kind, hotspots)
                        with open(path, 'wb') as file:
                                encode(file, container, images)
                except (IconError, OSError) as e:
                        self.abort(path, e)
                        return

                for indx, entry in enumerate(container):
                        self.logger.info("** image_%d ** (width, height) = (%d, %d), %s" %(indx, entry.width, entry.height, container.aux(indx)))
                self.logger.info("saved = %s" %path)

        def main(self):
                """ Main process. """
                getattr(self, self.options['mode'])()
                return (1 if self.failed else 0)


def main(argv = None):
        parser = icondir_parser()
        options = vars(parser.parse_args(argv))
        if options['mode'] is None:
                parser.print_help()
                return 2
        create_log(options)
        return Process(options).main()
