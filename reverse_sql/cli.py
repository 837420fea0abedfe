import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from reverse_sql.codegen import CodeGenerator
from reverse_sql.colored_logging import (
    setup_colored_logging,
    log_success,
    log_progress,
    log_section,
)
from reverse_sql.config_validation import ToolConfigSchema, load_config
from reverse_sql.exceptions import ReverseSqlError
from reverse_sql.introspection import load_schema_snapshot
from reverse_sql.schema_builder import ReverseDbBuilder

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reverse-sql",
        description="Generate C# models, mappers and a data context from a SQL Server schema snapshot.",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "-s",
        "--snapshot",
        dest="snapshot_path",
        help="Path to the schema snapshot (YAML or JSON). Overrides config file setting.",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        help="Directory to write the generated C# files to. Overrides config file setting.",
    )
    parser.add_argument(
        "--namespace",
        help="C# namespace of the generated code. Overrides config file setting.",
    )
    parser.add_argument(
        "--include-schema",
        action="store_true",
        default=None,
        help="Prefix names of objects outside the default schema with the schema name.",
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


def run(config: ToolConfigSchema) -> List[Path]:
    """Run the whole pipeline for a validated configuration and return the written files."""
    options = config.to_options()

    log_section(logger, "Schema Snapshot")
    log_progress(logger, "Loading schema snapshot...")
    schema = load_schema_snapshot(config.snapshot_path)

    log_section(logger, "Type Resolution")
    builder = ReverseDbBuilder(options, continue_on_error=config.continue_on_error)
    schema = builder.build(schema, **config.filters)
    if not schema.tables and not schema.stored_procedures:
        logger.warning("Nothing to generate after filtering.")
        return []

    log_section(logger, "C# Code Generation")
    log_progress(logger, f"Writing generated code to {config.output_dir}...")
    generator = CodeGenerator(
        output_dir=config.output_dir,
        namespace=config.namespace,
        data_context_class_name=config.data_context_class_name,
        options=options,
    )
    return generator.generate(
        schema,
        generate_models=config.generate_models,
        generate_mappers=config.generate_mappers,
        generate_data_access=config.generate_data_access,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    # --- Logging Setup ---
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_colored_logging(level=log_level, use_colors=not args.no_color)

    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    # --- Main Execution Pipeline ---
    try:
        log_progress(logger, "Loading configuration...")
        config = load_config(args.config, args)
        logger.debug(f"Effective configuration loaded: {config}")

        written = run(config)

        log_section(logger, "COMPLETION")
        log_success(logger, f"Generation completed successfully: {len(written)} file(s) written.")
        for path in written:
            logger.info(f"   {path}")

    # --- Error Handling ---
    except ReverseSqlError as e:
        logger.error(f"{type(e).__name__}: {e}", exc_info=args.verbose)
        sys.exit(1)
    except Exception as e:
        logger.error(
            f"An unexpected error occurred during generation: {e}", exc_info=True
        )
        sys.exit(1)


# --- Script Entry Point ---
if __name__ == "__main__":
    main()
