#!/usr/bin/env python3
"""
Huffman Compression Tool

Usage:
    Compress:   huffman compress input.bin output.huff
    Decompress: huffman decompress output.huff restored.bin
    Inspect:    huffman inspect output.huff

Use '-' for stdin/stdout. Existing output files are refused unless --force
is given. Log level comes from -v/--verbose or HUFFMAN_LOG_LEVEL.
"""

import argparse
import logging
import os
import sys

from huffman_errors import CorruptContainerError
from huffman_service import HuffmanService

LOG_LEVEL_ENV = "HUFFMAN_LOG_LEVEL"
STDIO = "-"


def configure_logging(verbosity, environ=None):
    """-v -> INFO, -vv -> DEBUG; otherwise HUFFMAN_LOG_LEVEL, default WARNING."""
    environ = os.environ if environ is None else environ
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        name = environ.get(LOG_LEVEL_ENV, "WARNING").upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(level)
    return level


def read_input(path):
    if path == STDIO:
        return sys.stdin.buffer.read()
    with open(path, "rb") as f:
        return f.read()


def write_output(path, data, force=False):
    if path == STDIO:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
        return
    # 'x' mode fails if the file exists
    mode = "wb" if force else "xb"
    with open(path, mode) as f:
        f.write(data)


def cmd_compress(service, args):
    data = read_input(args.input)
    container = service.compress(data)
    write_output(args.output, container, args.force)
    print(
        f"Compressed: {args.input} -> {args.output} ({len(data)} -> {len(container)} bytes)",
        file=sys.stderr,
    )


def cmd_decompress(service, args):
    blob = read_input(args.input)
    data = service.decompress(blob)
    write_output(args.output, data, args.force)
    print(
        f"Decompressed: {args.input} -> {args.output} ({len(blob)} -> {len(data)} bytes)",
        file=sys.stderr,
    )


def _printable(symbol):
    return repr(chr(symbol)) if 32 <= symbol <= 126 else f"0x{symbol:02x}"


def cmd_inspect(service, args):
    info = service.inspect(read_input(args.input))
    print(f"original length:  {info.original_length}")
    print(f"distinct symbols: {info.distinct_symbols}")
    print(f"header bytes:     {info.header_size}")
    print(f"payload bytes:    {info.payload_size}")
    print(f"ratio:            {info.ratio:.4f}")
    if info.codes:
        print(f"max code length:  {info.max_code_length}")
        for symbol, code in sorted(info.codes.items(), key=lambda x: (len(x[1]), x[0])):
            print(f"  {_printable(symbol):>6}  {code}")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="huffman", description="Huffman compression of arbitrary bytes"
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase log output (-v info, -vv debug)",
    )
    sub = parser.add_subparsers(dest="mode", required=True)

    c = sub.add_parser("compress", help="Compress a file")
    c.add_argument("input")
    c.add_argument("output")
    c.add_argument("--force", action="store_true", help="Overwrite an existing output file")
    c.set_defaults(func=cmd_compress)

    d = sub.add_parser("decompress", help="Decompress a container")
    d.add_argument("input")
    d.add_argument("output")
    d.add_argument("--force", action="store_true", help="Overwrite an existing output file")
    d.set_defaults(func=cmd_decompress)

    i = sub.add_parser("inspect", help="Show the header and code table of a container")
    i.add_argument("input")
    i.set_defaults(func=cmd_inspect)

    return parser


def main(argv=None):
    """Parse command-line arguments and run the selected mode."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        args.func(HuffmanService(), args)
    except FileExistsError as e:
        print(f"Error: {e.filename} already exists (use --force)", file=sys.stderr)
        return 1
    except (OSError, CorruptContainerError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
