"""Argument parsing functionality for noderesolve."""

import argparse

from resolver.categories import all_category_names


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="noderesolve",
        description=(
            "noderesolve - resolve node module specifiers to files the way require() does"
        ),
        add_help=True,
    )

    parser.add_argument("specifiers",
                        metavar="SPECIFIER",
                        help="Module specifier(s) to resolve, i.e: ./lib/x, lodash, @scope/pkg/sub",
                        nargs="+")

    parser.add_argument("-b", "--basedir",
                        dest="BASEDIR",
                        help="Directory to resolve from (default: current directory)",
                        action="store", type=str)
    parser.add_argument("--filename",
                        dest="FILENAME",
                        help="Requiring file name, used in error messages",
                        action="store", type=str)
    parser.add_argument("-e", "--extension",
                        dest="EXTENSIONS",
                        help="Extension to try after the bare name (repeatable, default: .js)",
                        action="append", type=str)
    parser.add_argument("-p", "--path",
                        dest="PATHS",
                        help="Extra global search directory (repeatable)",
                        action="append", type=str)

    resolution_group = parser.add_mutually_exclusive_group()
    resolution_group.add_argument("--category",
                                  dest="CATEGORY",
                                  help="Exports compatibility category",
                                  action="store", type=str,
                                  choices=all_category_names())
    resolution_group.add_argument("--range",
                                  dest="RANGE",
                                  help="Node version range selecting the categories, i.e: '>=14'",
                                  action="store", type=str)
    resolution_group.add_argument("--engines",
                                  dest="ENGINES",
                                  help="Succeed if any category would resolve the specifier",
                                  action="store_true")

    parser.add_argument("-c", "--condition",
                        dest="CONDITIONS",
                        help="Exports condition, in priority order (repeatable)",
                        action="append", type=str)
    parser.add_argument("--no-core",
                        dest="NO_CORE",
                        help="Do not short-circuit built-in module names",
                        action="store_true")
    parser.add_argument("--preserve-symlinks",
                        dest="PRESERVE_SYMLINKS",
                        help="Do not resolve symlinks in the base directory or result",
                        action="store_true")
    parser.add_argument("--json",
                        dest="JSON",
                        help="Print results as a JSON object",
                        action="store_true")
    parser.add_argument("--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store", type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='WARNING')

    return parser.parse_args(argv)
