"""depsolver: resolve compatible package versions from the command line."""

import json
import logging
import os
import sys
from typing import Dict, List, Optional, Tuple

import requirements
from packaging.utils import canonicalize_name

from args import parse_args
from cli_config import load_runtime_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes, OutputFormats
from errors import (
    ProviderError,
    ResolutionFailure,
    ResolutionTimeout,
    SpecifierSyntaxError,
    VersionSyntaxError,
)
from providers.offline import OfflineDependencyProvider
from providers.pypi import PyPIDependencyProvider
from solver.service import resolve
from versioning.specifiers import marker_applies, split_requirement

logger = logging.getLogger(__name__)

Requirement = Tuple[str, str]


def requirements_from_tokens(tokens: List[str]) -> List[Requirement]:
    """Turn "-p" style tokens such as "requests>=2,<3" into (name, specs) pairs.

    Raises:
        SpecifierSyntaxError: a token is malformed.
    """
    pairs = []
    for token in tokens:
        split = split_requirement(token)
        if split is not None:
            pairs.append(split)
    return pairs


def load_requirements_file(file_name: str) -> List[Requirement]:
    """Read root requirements from a requirements.txt file.

    Editable and URL requirements without a project name are skipped.

    Raises:
        OSError: the file cannot be read.
        SpecifierSyntaxError: a marker is malformed.
    """
    with open(file_name, "r", encoding="utf-8") as file:
        body = file.read()

    pairs = []
    for req in requirements.parse(body):
        if not req.name:
            logger.warning("Skipping requirement without a project name: %s", req.line)
            continue
        line = req.line or ""
        marker = line.split(";", 1)[1].split(" #", 1)[0] if ";" in line else None
        if not marker_applies(marker, line):
            continue
        pairs.append((canonicalize_name(req.name), ",".join(op + version for op, version in req.specs)))
    logger.info("Loaded %d requirements from %s", len(pairs), file_name)
    return pairs


def build_provider(args):
    """Offline provider for --index, otherwise the PyPI provider."""
    if args.INDEX_FILE:
        return OfflineDependencyProvider.from_file(args.INDEX_FILE)
    return PyPIDependencyProvider(url=Constants.REGISTRY_URL_PYPI)


def _output_format(args) -> str:
    if args.OUTPUT_FORMAT:
        return args.OUTPUT_FORMAT
    if args.OUTPUT and not args.OUTPUT.lower().endswith(".json"):
        return OutputFormats.TEXT.value
    return OutputFormats.JSON.value


def render(solution: Dict[str, str], output_format: str) -> str:
    """Render a solution as JSON or as pinned requirement lines."""
    if output_format == OutputFormats.TEXT.value:
        return "".join(f"{name}=={version}\n" for name, version in solution.items())
    return json.dumps(solution, ensure_ascii=False, indent=4) + "\n"


def write_output(text: str, path: Optional[str]) -> None:
    if not path:
        sys.stdout.write(text)
        return
    with open(path, "w", encoding="utf-8") as file:
        file.write(text)
    logging.info("Solution has been successfully exported at: %s", path)


def run(args) -> int:
    """Resolve according to parsed arguments; returns the process exit code."""
    try:
        reqs = requirements_from_tokens(args.PACKAGES)
        if args.REQUIREMENTS_FILE:
            reqs.extend(load_requirements_file(args.REQUIREMENTS_FILE))
        dev_reqs = requirements_from_tokens(args.DEV_PACKAGES)
    except OSError as e:
        logging.error("Couldn't read requirements file: %s", e)
        return ExitCodes.FILE_ERROR.value
    except SpecifierSyntaxError as e:
        logging.error("Invalid requirement: %s", e)
        return ExitCodes.INPUT_ERROR.value

    if not reqs and not dev_reqs:
        logging.warning("No requirements given; only the root project will be selected.")

    try:
        provider = build_provider(args)
    except OSError as e:
        logging.error("Couldn't read index file: %s", e)
        return ExitCodes.FILE_ERROR.value
    except (ValueError, SpecifierSyntaxError) as e:
        logging.error("Invalid index file %s: %s", args.INDEX_FILE, e)
        return ExitCodes.INPUT_ERROR.value

    try:
        solution = resolve(
            args.ROOT_NAME,
            args.ROOT_VERSION,
            reqs,
            dev_requirements=dev_reqs,
            provider=provider,
            timeout=Constants.RESOLUTION_TIMEOUT_SEC,
        )
    except (VersionSyntaxError, SpecifierSyntaxError) as e:
        logging.error("Invalid input: %s", e)
        return ExitCodes.INPUT_ERROR.value
    except ResolutionFailure as e:
        logging.error("Version solving failed: %s", e.incompatibility)
        return ExitCodes.RESOLUTION_FAILURE.value
    except ResolutionTimeout as e:
        logging.error("%s", e)
        return ExitCodes.TIMEOUT.value
    except ProviderError as e:
        logging.error("Connection error: %s", e)
        return ExitCodes.CONNECTION_ERROR.value

    try:
        write_output(render(solution, _output_format(args)), args.OUTPUT)
    except OSError as e:
        logging.error("Output couldn't be written to disk: %s", e)
        return ExitCodes.FILE_ERROR.value
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)

    if args.CONFIG and not os.path.isfile(args.CONFIG):
        logging.error("Config file not found: %s", args.CONFIG)
        sys.exit(ExitCodes.FILE_ERROR.value)
    load_runtime_config(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    code = run(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action="main", outcome=code)
        )
    sys.exit(code)


if __name__ == "__main__":
    main()
