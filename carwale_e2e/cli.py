"""CLI entry point for the CarWale browser suite.

    carwale-e2e run [options] [-- pytest args]
    carwale-e2e report
    carwale-e2e check-config

Machine-readable results are printed as a JSON envelope:
{"success": bool, "command": str, "data": {...}, "message": str}
"""

import json
import logging
import os
import sys
from typing import Optional, Sequence

import click
import pytest

from .reporting import JsonReporter, LATEST_REPORT_NAME
from .settings import SuiteSettings, VALID_BROWSERS, load_settings, validate_settings
from .transport import SiteProbe

LIVE_ENV = "CARWALE_LIVE"


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(package_name="carwale-e2e")
def main(verbose: bool):
    """CarWale Playwright test automation."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command(context_settings={"ignore_unknown_options": True})
@click.option("--browser", "browsers", multiple=True, type=click.Choice(sorted(VALID_BROWSERS)),
              help="Browser to run (repeatable). Default: all configured browsers.")
@click.option("--workers", type=int, help="Parallel workers. Default: one per CPU (1 on CI).")
@click.option("--retries", type=int, help="Retries per failed test. Default: 1 (2 on CI).")
@click.option("--base-url", help="Site under test.")
@click.option("--headed", is_flag=True, help="Show the browser window.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="YAML settings file.")
@click.option("--report-dir", help="Directory for JSON run reports.")
@click.option("--preflight/--no-preflight", default=True, help="Check the site is reachable first.")
@click.argument("pytest_args", nargs=-1, type=click.UNPROCESSED)
def run(
    browsers: Sequence[str],
    workers: Optional[int],
    retries: Optional[int],
    base_url: Optional[str],
    headed: bool,
    config_path: Optional[str],
    report_dir: Optional[str],
    preflight: bool,
    pytest_args: Sequence[str],
):
    """Run the live browser specs and write the run report."""
    try:
        settings = load_settings(config_path)
    except (FileNotFoundError, ValueError) as e:
        output_error("run", f"Failed to load settings: {e}")
        sys.exit(1)

    if browsers:
        settings.browsers = list(browsers)
    if workers is not None:
        settings.workers = workers
    if retries is not None:
        settings.retries = retries
    if base_url:
        settings.base_url = base_url
    if headed:
        settings.headless = False
    if report_dir:
        settings.report_dir = report_dir

    validation = validate_settings(settings)
    if not validation.valid:
        errors_str = "; ".join(f"{e.path}: {e.message}" for e in validation.errors)
        output_error("run", f"Invalid settings: {errors_str}")
        sys.exit(1)

    if preflight:
        with SiteProbe(verify_tls=not settings.ignore_https_errors) as probe:
            result = probe.probe(settings.base_url)
        if not result.reachable:
            output_error("run", f"Site unreachable: {result.error}", url=result.url, attempts=result.attempts)
            sys.exit(1)
        click.echo(str(result))

    args = build_pytest_args(settings, config_path, pytest_args)
    os.environ[LIVE_ENV] = "1"
    sys.exit(int(pytest.main(args)))


@main.command()
@click.option("--report-dir", default=None, help="Directory holding latest-report.json.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="YAML settings file.")
def report(report_dir: Optional[str], config_path: Optional[str]):
    """Print the latest run report."""
    if report_dir is None:
        try:
            report_dir = load_settings(config_path).report_dir
        except (FileNotFoundError, ValueError) as e:
            output_error("report", f"Failed to load settings: {e}")
            sys.exit(1)

    latest_path = os.path.join(report_dir, LATEST_REPORT_NAME)
    reporter = JsonReporter()
    try:
        summary = reporter.load_latest(report_dir)
    except FileNotFoundError:
        output_error("report", f"No report found at {latest_path}")
        sys.exit(1)
    except ValueError as e:
        output_error("report", str(e))
        sys.exit(1)

    output = reporter.generate_flow_output(summary, latest_path)
    click.echo(json.dumps(output, ensure_ascii=False))
    if not output["success"]:
        sys.exit(1)


@main.command("check-config")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="YAML settings file.")
def check_config(config_path: Optional[str]):
    """Validate the resolved suite settings."""
    try:
        settings = load_settings(config_path)
    except (FileNotFoundError, ValueError) as e:
        output_error("check-config", f"Failed to load settings: {e}")
        sys.exit(1)

    validation = validate_settings(settings)
    output = {
        "success": validation.valid,
        "command": "check-config",
        "data": {
            "settings": settings.to_dict(),
            "errors": [{"path": e.path, "message": e.message} for e in validation.errors],
            "warnings": [{"path": w.path, "message": w.message} for w in validation.warnings],
        },
        "message": str(validation),
    }
    click.echo(json.dumps(output, ensure_ascii=False))
    if not validation.valid:
        sys.exit(1)


def build_pytest_args(
    settings: SuiteSettings,
    config_path: Optional[str] = None,
    extra_args: Sequence[str] = (),
) -> list[str]:
    """Translate settings into pytest / pytest-playwright / xdist arguments."""
    args = [
        settings.test_dir,
        "--carwale-report",
        "--carwale-report-dir", settings.report_dir,
        "--base-url", settings.base_url,
    ]
    if config_path:
        args += ["--carwale-config", config_path]
    for browser in settings.browsers:
        args += ["--browser", browser]
    if not settings.headless:
        args.append("--headed")

    args += ["-n", str(settings.workers) if settings.workers else "auto"]
    if settings.retries:
        args += ["--reruns", str(settings.retries)]

    args += [
        "--screenshot", settings.screenshot,
        "--video", settings.video,
        "--tracing", settings.tracing,
        "--output", settings.output_dir,
    ]
    args.extend(extra_args)
    return args


def output_error(command: str, message: str, **extra):
    """Output error in JSON envelope format."""
    output = {
        "success": False,
        "command": command,
        "data": extra or None,
        "message": message,
    }
    click.echo(json.dumps(output, ensure_ascii=False))


if __name__ == "__main__":
    main()
