#!/usr/bin/env python3
"""CLI entry point: render character art to PNG base64 / data URIs."""

import argparse
import os
import sys

from tqdm import tqdm

from pngraster.art import load_color_map
from pngraster.errors import RasterError
from pngraster.png_writer import DATA_URI_PREFIX, png_bytes_to_base64
from pngraster.raster import RasterImage


def _read_text(path):
    if path == '-':
        return sys.stdin.read()
    with open(path, encoding='utf-8') as f:
        return f.read()


def render_art(text, color_map, scale=1, fmt='uri'):
    """Render art text to base64 or data URI text."""
    img = RasterImage.from_character_art(text, color_map)
    img.scale(scale)
    b64 = png_bytes_to_base64(img.to_png_bytes())
    return DATA_URI_PREFIX + b64 if fmt == 'uri' else b64


def cmd_art(args):
    color_map = {}
    if args.colors:
        color_map = load_color_map(_read_text(args.colors))

    files = args.files
    results = []
    progress = tqdm(files, desc="Rendering", file=sys.stderr, disable=len(files) < 2)
    for path in progress:
        # one shared map keeps random colors consistent across files
        text = render_art(_read_text(path), color_map, args.scale, args.format)
        results.append((path, text))

    if len(results) == 1:
        output = results[0][1] + '\n'
    else:
        output = ''.join(f"{os.path.basename(path)}: {text}\n"
                         for path, text in results)

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(output)
        print(f"Written to {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(output)


def cmd_info(args):
    with open(args.file, 'rb') as f:
        img = RasterImage.from_png(f.read())
    print(f"File: {args.file}")
    print(f"Size: {img.width}x{img.height}")
    print(f"Top-left: {img.get_color(0, 0).to_hex()}")


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Render character art to PNG base64 text'
    )
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # 'art' command - render one or more character art files
    art_parser = subparsers.add_parser('art', help='Render character art files')
    art_parser.add_argument('files', nargs='+',
                            help="Art files, one pixel per character ('-' for stdin)")
    art_parser.add_argument('--colors', help='JSON file mapping characters to colors')
    art_parser.add_argument('--scale', type=int, default=1,
                            help='Integer upscale factor (default: 1)')
    art_parser.add_argument('--format', choices=['base64', 'uri'], default='uri',
                            help='Output format (default: uri)')
    art_parser.add_argument('-o', '--output', help='Output file (default: stdout)')

    # 'info' command - show PNG info
    info_parser = subparsers.add_parser('info', help='Show PNG file info')
    info_parser.add_argument('file', help='PNG file to inspect')

    args = parser.parse_args(argv)

    try:
        if args.command == 'art':
            cmd_art(args)
        elif args.command == 'info':
            cmd_info(args)
        else:
            parser.print_help()
            return 2
    except (RasterError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
