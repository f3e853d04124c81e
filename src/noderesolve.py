"""noderesolve - resolve node module specifiers from the command line.

    Returns:
        int: Exit code
"""
import json
import logging
import sys

import yaml

from constants import ErrorCodes, ExitCodes, _load_yaml_config
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from resolver import InvalidOptionsError, ResolveError, resolve_sync

logger = logging.getLogger(__name__)

CONFIG_OPTION_KEYS = (
    "extensions",
    "paths",
    "module_directory",
    "include_core_modules",
    "preserve_symlinks",
    "node_version",
    "resolution",
)

_EXIT_FOR_CODE = {
    ErrorCodes.MODULE_NOT_FOUND.value: ExitCodes.NOT_FOUND,
    ErrorCodes.INVALID_OPTIONS.value: ExitCodes.CONFIG_ERROR,
    ErrorCodes.INVALID_BASEDIR.value: ExitCodes.CONFIG_ERROR,
    ErrorCodes.PACKAGE_PATH_NOT_EXPORTED.value: ExitCodes.PACKAGE_ERROR,
    ErrorCodes.INVALID_PACKAGE_MAIN.value: ExitCodes.PACKAGE_ERROR,
    ErrorCodes.INCORRECT_PACKAGE_MAIN.value: ExitCodes.PACKAGE_ERROR,
}


def load_config_options(config_path=None):
    """Return resolver option defaults from the ``resolver`` config section.

    Args:
        config_path (str, optional): Explicit config file path.

    Returns:
        dict: Options understood by ``resolve_sync``.
    """
    cfg = _load_yaml_config(config_path)
    section = cfg.get("resolver") or {}
    if not isinstance(section, dict):
        raise InvalidOptionsError("config `resolver` section must be a mapping")
    unknown = sorted(set(section) - set(CONFIG_OPTION_KEYS))
    if unknown:
        logger.warning("Ignoring unknown resolver config key(s): %s", ", ".join(unknown))
    return {key: section[key] for key in CONFIG_OPTION_KEYS if key in section}


def build_options(args, config_options):
    """Merge config file options with CLI flags; CLI flags win.

    Args:
        args (argparse.Namespace): Parsed CLI arguments.
        config_options (dict): Options loaded from the config file.

    Returns:
        dict: Options for ``resolve_sync``.
    """
    options = dict(config_options)
    if args.BASEDIR:
        options["basedir"] = args.BASEDIR
    if args.FILENAME:
        options["filename"] = args.FILENAME
    if args.EXTENSIONS:
        options["extensions"] = args.EXTENSIONS
    if args.PATHS:
        options["paths"] = args.PATHS
    if args.NO_CORE:
        options["include_core_modules"] = False
    if args.PRESERVE_SYMLINKS:
        options["preserve_symlinks"] = True

    if args.CATEGORY:
        options["resolution"] = {"category": args.CATEGORY}
    elif args.ENGINES:
        options["resolution"] = {"engines": True}
    elif args.RANGE:
        options["resolution"] = args.RANGE

    if args.CONDITIONS:
        resolution = options.get("resolution")
        if not isinstance(resolution, dict):
            raise InvalidOptionsError("--condition requires --category or --engines")
        options["resolution"] = dict(resolution, conditions=args.CONDITIONS)
    return options


def resolve_all(specifiers, options):
    """Resolve each specifier, collecting results and error codes.

    Returns:
        dict: specifier -> {"path": ...} or {"error": ..., "code": ...}
    """
    results = {}
    for specifier in specifiers:
        try:
            results[specifier] = {"path": resolve_sync(specifier, options)}
        except ResolveError as exc:
            logger.error("%s: %s", exc.code, exc.message)
            results[specifier] = {"error": exc.message, "code": exc.code}
    return results


def exit_code_for(results):
    """Pick the most severe exit code among the results."""
    codes = [r["code"] for r in results.values() if "code" in r]
    if not codes:
        return ExitCodes.SUCCESS
    exits = [_EXIT_FOR_CODE.get(code, ExitCodes.PACKAGE_ERROR) for code in codes]
    return max(exits, key=lambda e: e.value)


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    try:
        options = build_options(args, load_config_options(args.CONFIG))
    except (OSError, yaml.YAMLError) as e:
        logger.error("Failed to load config: %s", e)
        sys.exit(ExitCodes.CONFIG_ERROR.value)
    except InvalidOptionsError as e:
        logger.error("%s", e)
        sys.exit(ExitCodes.CONFIG_ERROR.value)

    results = resolve_all(args.specifiers, options)

    if args.JSON:
        print(json.dumps(results, indent=2))
    else:
        for result in results.values():
            if "path" in result:
                print(result["path"])

    code = exit_code_for(results)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(
                event="function_exit",
                component="cli",
                action="main",
                outcome=code.name.lower(),
            )
        )
    sys.exit(code.value)


if __name__ == "__main__":
    main()
