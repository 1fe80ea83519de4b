"""Defines the command-line interface for simp-repo-sigs.

This module uses the `click` library to expose the validation pipeline as a
single command. It is pointed at a SIMP directory, as extracted from an ISO or
a SIMP tarball, and validates that every RPM in it is signed by a key shipped
in the `simp-gpgkeys` RPM and was built on a trusted build host.
"""
import json
import sys
import logging
from typing import Any, Optional

import click
from rich.console import Console
from halo import Halo

from . import __version__
from .core.config import Config
from .core.exceptions import SimpSigsError
from .core.report import (
    EXIT_ERROR,
    REPORT_DESCRIPTIONS,
    ReportMode,
    build_report,
    quiet_exit_code,
)
from .core.validator import validate_directory
from .utils.rpm import RpmInspector

# Reports are read by scripts: no markup, highlighting, or wrapping.
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

logger = logging.getLogger(__name__)


class ValidatorCommand(click.Command):
    """A click Command that exits with 1 on usage errors.

    Click exits with 2 on bad arguments, but 2 is reserved here for "invalid
    RPMs found". The command's return value becomes the exit status.
    """

    def main(self, *args: Any, **kwargs: Any) -> Any:
        kwargs.pop("standalone_mode", None)
        try:
            rv = super().main(*args, standalone_mode=False, **kwargs)
        except click.ClickException as e:
            e.show()
            sys.exit(EXIT_ERROR)
        except click.exceptions.Abort:
            err_console.print("Aborted!")
            sys.exit(EXIT_ERROR)
        sys.exit(rv or 0)


def _report_type_help() -> str:
    lines = ["Output a report of this type:"]
    lines.extend(f"{mode.value}: {desc}." for mode, desc in REPORT_DESCRIPTIONS.items())
    return " ".join(lines)


@click.command(cls=ValidatorCommand, context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("target_dir", type=click.Path(exists=True, file_okay=False, dir_okay=True, resolve_path=True))
@click.option("--report-type", "-t", type=click.Choice(ReportMode.choices()), default=ReportMode.INVALID.value,
              show_default=True, help=_report_type_help())
@click.option("--quiet", "-q", is_flag=True,
              help="No output, returns 1 if invalid RPMs present, 0 otherwise. All other options are ignored.")
@click.option("--json", "json_output", is_flag=True, help="Output the report in JSON format.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to a custom config file.")
@click.option("--verbose", is_flag=True, help="Enable verbose output.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.version_option(__version__)
def main(target_dir: str, report_type: str, quiet: bool, json_output: bool, config_path: Optional[str],
         verbose: bool, debug: bool) -> int:
    """Validate the signatures of all RPMs in TARGET_DIR.

    TARGET_DIR is a SIMP directory holding a single 'simp-gpgkeys*.rpm'. Every
    RPM below it must be signed by one of the keys in that RPM and must have
    been built on a trusted build host.

    \b
    Exit codes:
        0  No issues found.
        1  General error, or invalid RPMs found in quiet mode.
        2  Invalid RPMs found.
    """
    if quiet:
        log_level = logging.ERROR
    else:
        log_level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=log_level, format='%(asctime)s - %(levelname)s - %(message)s')
    # basicConfig is a no-op when the root logger already has handlers.
    logging.getLogger("simpsigs").setLevel(log_level)
    logger.debug("Debug mode enabled.")

    config_obj = Config(config_path=config_path)
    inspector = RpmInspector.from_config(config_obj)

    show_progress = not quiet and sys.stderr.isatty()
    with Halo(text="Extracting trusted keys...", spinner="dots", stream=sys.stderr, enabled=show_progress) as spinner:
        def _progress(position: int, total: int, path: str) -> None:
            spinner.text = f"Checking RPM {position}/{total}"

        try:
            run = validate_directory(target_dir, config_obj, inspector=inspector, progress=_progress)
        except SimpSigsError as e:
            spinner.stop()
            err_console.print(f"Error: {e}", markup=False, soft_wrap=True)
            return EXIT_ERROR

    logger.info(
        f"Classified {len(run.results)} RPM(s) under {run.target_dir} against "
        f"{len(run.trust_map)} trusted key(s) from {run.trust_anchor}"
    )

    if quiet:
        return quiet_exit_code(run.results)

    report = build_report(ReportMode(report_type), run.results, run.trust_map)
    if json_output:
        console.out(json.dumps(report.data, indent=2), highlight=False)
    else:
        for line in report.lines:
            console.out(line, highlight=False)
    return report.exit_code


if __name__ == "__main__":
    main()
