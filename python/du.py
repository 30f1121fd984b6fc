#!/usr/bin/env python3
"""
Name: du
Description: display disk usage statistics
Author: Greg Hewgill, greg@hewgill.com (Original Perl Author)
License: perl
"""

import sys
import os
import stat
import re
import argparse
from collections import namedtuple

# Constants
EX_SUCCESS = 0
EX_FAILURE = 1
FIELD_WIDTH = 8
UNLIMITED = -1

# Largest tier first; unit is in kilobytes.
TIERS = (
    ('T', 1024 ** 3),
    ('G', 1024 ** 2),
    ('M', 1024),
    ('K', 1),
)

Options = namedtuple(
    'Options',
    ['show_all', 'grand_total', 'human_readable', 'max_depth', 'program_name', 'paths'],
)


def ceil_div(numerator, denominator):
    """Integer division rounding up."""
    return -(-numerator // denominator)


def disk_usage(stats):
    """
    Returns the storage allocated to an entry in kilobyte-equivalent units,
    i.e. its count of 512-byte blocks halved.
    """
    blocks = getattr(stats, 'st_blocks', None)
    if blocks is None:
        # No st_blocks on this platform; fall back to whole 512-byte blocks.
        blocks = ceil_div(stats.st_size, 512)
    return blocks // 2


def is_file(mode):
    """Regular files and symlinks are both reported as files."""
    return stat.S_ISREG(mode) or stat.S_ISLNK(mode)


def human_readable(size):
    """
    Scales a size in kilobytes to the largest of K, M, G or T in which it is
    at least 1. Values of 10 or more are rounded up to a whole number,
    smaller ones up to the nearest tenth, so 1.01K prints as '1.1K'.
    """
    if size == 0:
        return "0"
    for suffix, unit in TIERS:
        if size < unit:
            continue
        if size >= 10 * unit:
            return f"{ceil_div(size, unit)}{suffix}"
        tenths = ceil_div(size * 10, unit)
        return f"{tenths // 10}.{tenths % 10}{suffix}"
    raise ValueError(f"negative size: {size}")


def format_line(size, label, human=False):
    """Formats a size and its label, size left-justified in a fixed field."""
    text = human_readable(size) if human else str(size)
    return f"{text:<{FIELD_WIDTH}}{label}"


class DiskUsageTraverser:
    """
    A class to encapsulate the state and logic for traversing filesystems
    and calculating disk usage, mimicking the `du` command.
    """
    def __init__(self, options):
        self.options = options
        self.exit_status = EX_SUCCESS
        self.grand_total = 0

    def run(self, paths=None):
        """
        Processes all command-line paths, in the order given.
        """
        paths = paths if paths is not None else self.options.paths
        if not paths:
            self.grand_total += self.traverse_directory('.', 0)

        for path in paths:
            try:
                stats = os.lstat(path)
            except OSError:
                self.warn(f"cannot access '{path}': No such file or directory")
                continue

            if is_file(stats.st_mode):
                self.grand_total += self.report(disk_usage(stats), path)
            elif stat.S_ISDIR(stats.st_mode):
                self.grand_total += self.traverse_directory(path, 0, stats)
            # Devices, fifos and sockets given as operands are not counted.

        if self.options.grand_total:
            self.report(self.grand_total, "total")

        return self.exit_status

    def depth_ok(self, depth):
        """True if an entry at this depth may be printed."""
        max_depth = self.options.max_depth
        return max_depth == UNLIMITED or depth <= max_depth

    def report(self, size, label):
        """Prints one usage line and hands the size back to the caller."""
        print(format_line(size, label, self.options.human_readable))
        return size

    def warn(self, message):
        print(f"{self.options.program_name}: {message}", file=sys.stderr)
        self.exit_status = EX_FAILURE

    def traverse_directory(self, path, depth, stats=None):
        """
        Traverses a directory, calculating and printing disk usage.
        Each directory is printed after all of its children.

        The walk keeps its own stack of unfinished directories rather than
        recursing, so arbitrarily deep trees are handled.
        """
        # --- 1. The directory's own storage is always counted ---
        if stats is None:
            try:
                stats = os.lstat(path)
            except OSError as e:
                self.warn(f"cannot access '{path}': {e.strerror}")
                return 0

        stack = [self._enter(path, depth, stats)]
        while True:
            current = stack[-1]

            # --- 2. Add up the children, descending into subdirectories ---
            entry = next(current.children, None)
            if entry is not None:
                try:
                    child_stats = entry.stat(follow_symlinks=False)
                except OSError as e:
                    self.warn(f"cannot access '{entry.path}': {e.strerror}")
                    continue
                if stat.S_ISDIR(child_stats.st_mode):
                    stack.append(self._enter(entry.path, current.depth + 1, child_stats))
                else:
                    current.total += self._leaf_usage(entry.path, child_stats, current.depth + 1)
                continue

            # --- 3. Print the directory once its subtree is summed ---
            stack.pop()
            if self.depth_ok(current.depth):
                self.report(current.total, current.path)
            if not stack:
                return current.total
            stack[-1].total += current.total

    def _enter(self, path, depth, stats):
        """Starts a directory visit: its own storage plus its listed entries."""
        return _Directory(path, depth, disk_usage(stats), iter(self._list_directory(path)))

    def _list_directory(self, path):
        """
        Reads every entry of a directory, closing the handle before the
        walk goes deeper. On failure the entries read so far are kept.
        """
        entries = []
        try:
            with os.scandir(path) as it:
                for entry in it:
                    entries.append(entry)
        except OSError as e:
            self.warn(f"cannot read directory '{path}': {e.strerror}")
        return entries

    def _leaf_usage(self, path, stats, depth):
        """Usage of a non-directory entry, printed if -a and the depth allow."""
        if is_file(stats.st_mode) and self.options.show_all and self.depth_ok(depth):
            return self.report(disk_usage(stats), path)
        return disk_usage(stats)


class _Directory:
    """A directory whose subtree is still being summed."""
    __slots__ = ('path', 'depth', 'total', 'children')

    def __init__(self, path, depth, total, children):
        self.path = path
        self.depth = depth
        self.total = total
        self.children = children


class DuArgumentParser(argparse.ArgumentParser):
    """An ArgumentParser that reports errors the way `du` does and exits 1."""
    def error(self, message):
        sys.stderr.write(f"{self.prog}: {message}\n")
        sys.stderr.write(f"Try '{self.prog} --help' for more information.\n")
        sys.exit(EX_FAILURE)


def max_depth_type(value):
    """Validates the argument of --max-depth: a nonnegative integer."""
    if not re.fullmatch(r'[0-9]+', value):
        raise argparse.ArgumentTypeError(f"invalid maximum depth '{value}'")
    return int(value)


def build_parser(program_name):
    parser = DuArgumentParser(
        prog=program_name,
        description="Display disk usage statistics.",
        usage="%(prog)s [-ach] [--max-depth=N] [file ...]",
        add_help=False,  # -h means human-readable
        allow_abbrev=False,
    )
    parser.add_argument('-a', action='store_true', help='Display an entry for each file, not just directories.')
    parser.add_argument('-c', action='store_true', help='Display a grand total.')
    parser.add_argument('-h', action='store_true', help='Print sizes in human readable format (e.g., 1.1K, 234M, 2.0G).')
    parser.add_argument(
        '--max-depth',
        type=max_depth_type,
        default=UNLIMITED,
        metavar='N',
        help='Print the total for an entry only if it is N or fewer levels below the command line argument.'
    )
    parser.add_argument('--help', action='help', help='Show this help message and exit.')

    parser.add_argument('files', nargs='*', help='Files or directories to process (default: the current directory).')
    return parser


def parse_options(argv=None, program_name=None):
    """
    Parses the command line into an immutable Options record. Options and
    paths may be mixed in any order.
    """
    if program_name is None:
        program_name = os.path.basename(sys.argv[0])
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser(program_name)

    # argparse would take '--' as the end of options and '--max-depth N'
    # as a separate value; du only knows '--max-depth=N'.
    for arg in argv:
        if arg in ('--', '--max-depth'):
            parser.error(f"unrecognized option '{arg}'")

    args = parser.parse_intermixed_args(argv)
    return Options(
        show_all=args.a,
        grand_total=args.c,
        human_readable=args.h,
        max_depth=args.max_depth,
        program_name=program_name,
        paths=list(args.files),
    )


def use_surrogate_escapes(stream):
    """
    File names that are not valid in the locale's encoding reach us as
    surrogate escapes; write them back out as the original bytes.
    """
    if hasattr(stream, 'reconfigure'):
        stream.reconfigure(errors='surrogateescape')


def main(argv=None):
    """Parses arguments and starts the disk usage traversal."""
    use_surrogate_escapes(sys.stdout)
    use_surrogate_escapes(sys.stderr)
    options = parse_options(argv)
    traverser = DiskUsageTraverser(options)
    exit_status = traverser.run()
    sys.exit(exit_status)

if __name__ == "__main__":
    main()
