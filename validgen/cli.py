import argparse
import logging
import sys
from typing import List, Optional

from validgen.colored_logging import (
    setup_colored_logging,
    get_colored_logger,
    log_success,
    log_progress,
    log_highlight,
    log_section,
)
from validgen.config import load_config, build_registry
from validgen.constants import TemplateVariants
from validgen.exceptions import ValidGenError
from validgen.generator import check_generation, render_all, run_generation


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="validgen",
        description=(
            "Generate validated domain records and validate-then-convert functions "
            "from tagged *Input dataclass declarations."
        ),
    )
    parser.add_argument(
        "input_files",
        nargs="*",
        metavar="FILE",
        help="Declaration files to process. Overrides input_files from the config file.",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "--variant",
        dest="template_variant",
        choices=TemplateVariants.ALL,
        help="Output variant: plain field copies or one NewType wrapper per field.",
    )
    parser.add_argument(
        "--output-suffix",
        dest="output_suffix",
        help="Suffix appended to the declaration file stem for the generated module.",
    )
    parser.add_argument(
        "--no-format",
        dest="format_output",
        action="store_false",
        default=None,
        help="Do not run Black on the generated code.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Exit with status 1 if any generated file is missing or out of date. Writes nothing.",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print generated modules instead of writing them.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose DEBUG logging.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for CI/CD environments).",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # --- Logging Setup ---
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_colored_logging(level=log_level, use_colors=not args.no_color)
    logger = get_colored_logger(__name__)

    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    # --- Main Execution Pipeline ---
    try:
        log_progress(logger, "Loading configuration...")
        config = load_config(args.config, args)
        registry = build_registry(config)
        log_highlight(logger, f"Found {len(config.input_files)} declaration file(s), {len(registry)} transform rule(s)")

        if args.check:
            log_section(logger, "Checking generated files")
            stale = check_generation(config, registry)
            if stale:
                logger.error(f"{len(stale)} generated file(s) are out of date. Re-run validgen.")
                return 1
            log_success(logger, "All generated files are up to date.")
            return 0

        if args.stdout:
            for result in render_all(config, registry):
                sys.stdout.write(result.content)
            return 0

        log_section(logger, "Code generation")
        results = run_generation(config, registry)
        log_success(logger, f"Generation completed successfully: {len(results)} file(s) written.")
        return 0

    # --- Error Handling ---
    except ValidGenError as e:
        logger.error(f"{e}", exc_info=args.verbose)
        return 1


# --- Script Entry Point ---
if __name__ == "__main__":
    sys.exit(main())
