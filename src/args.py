"""Argument parsing functionality for depsolver."""

import argparse

from constants import Constants, OutputFormats


def build_parser():
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="depsolver",
        description=(
            "depsolver - resolve compatible PyPI package versions with PubGrub"
        ),
        add_help=True,
    )

    parser.add_argument("-n", "--name",
                        dest="ROOT_NAME",
                        help="Name of the root project (default: %(default)s)",
                        action="store", type=str,
                        default=Constants.DEFAULT_ROOT_NAME)
    parser.add_argument("-V", "--root-version",
                        dest="ROOT_VERSION",
                        help="Version of the root project (default: %(default)s)",
                        action="store", type=str,
                        default=Constants.DEFAULT_ROOT_VERSION)

    parser.add_argument("-p", "--package",
                        dest="PACKAGES",
                        help='Requirement of the root project, e.g. "requests>=2,<3". Repeatable.',
                        action="append", type=str,
                        default=[])
    parser.add_argument("-r", "--requirements",
                        dest="REQUIREMENTS_FILE",
                        help="Read root requirements from a requirements.txt file",
                        action="store", type=str)
    parser.add_argument("--dev-package",
                        dest="DEV_PACKAGES",
                        help="Development requirement, resolved together with the others. Repeatable.",
                        action="append", type=str,
                        default=[])

    parser.add_argument("-i", "--index",
                        dest="INDEX_FILE",
                        help="Resolve against an offline JSON index instead of the registry",
                        action="store", type=str)
    parser.add_argument("--registry-url",
                        dest="REGISTRY_URL",
                        help="Base URL of a PyPI-compatible JSON API (default: %s)" % Constants.REGISTRY_URL_PYPI,
                        action="store", type=str)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="Give up resolving after this many seconds",
                        action="store", type=float)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file (JSON or text)",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or text). If not specified, inferred from --output extension; defaults to json.",
                        action="store",
                        type=str.lower,
                        choices=[f.value for f in OutputFormats])

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
