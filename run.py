#!/usr/bin/env python3
"""
Conflict Viz - Main CLI Entry Point
===================================

Command-line entry point for the conflict-deaths chart suite.  It runs in
one of two modes:

REPORT MODE (default)
    Loads the CSV (local path or http(s) URL), resolves its columns,
    normalizes the rows and renders every requested chart into a single
    self-contained HTML page.  A load or column failure still produces the
    page, with the failure message in every chart section.

DASHBOARD MODE (--dashboard)
    Spawns a Streamlit subprocess running dashboard.py, pointed at the same
    data and geo files through the CONFLICT_DATA_PATH / CONFLICT_GEO_PATH
    environment variables.

Usage:
    python run.py                                   # All charts -> conflict_charts.html
    python run.py --file data.csv --year 2022       # Different dataset / snapshot year
    python run.py --charts bar,waffle,choropleth    # Subset of charts
    python run.py --focus Ukraine Sudan --log-scale
    python run.py --dashboard --port 8502           # Interactive dashboard
"""

import argparse
import atexit
import logging
import os
import subprocess
import sys
import time
import webbrowser
from pathlib import Path

from conflict_viz.core.config import (
    DATA_PATH, GEO_PATH, DEFAULT_OUTPUT, LOG_DIR, SNAPSHOT_YEAR, TOP_N, PAGE_TITLE,
)
from conflict_viz.pipeline.loader import is_url
from conflict_viz.pipeline.orchestrator import ConflictChartPipeline, build_requests, prepare_page
from conflict_viz.visualization.registry import chart_kinds

logger = logging.getLogger(__name__)


# ==========================================
# PATH VALIDATION
# ==========================================

def validate_file_path(path: str, must_exist: bool = False) -> Path:
    """
    Resolve a user-supplied path and check it lives under an allowed directory.

    Allowed directories are the project root and the user's home directory.

    Args:
        path: Raw file path string from a CLI argument.
        must_exist: When True, raise ValueError if the resolved path does not
                    exist on disk.

    Returns:
        A fully-resolved Path object.

    Raises:
        ValueError: If the path is outside the allowed directories, or does
                    not exist when must_exist is True.
    """
    resolved = Path(path).resolve()

    if must_exist and not resolved.exists():
        raise ValueError(f"Invalid file path '{path}': File not found: {path}")

    project_root = Path(__file__).parent.resolve()
    home_dir = Path.home().resolve()
    allowed = any(
        resolved == root or root in resolved.parents
        for root in (project_root, home_dir)
    )
    if not allowed:
        raise ValueError(f"Invalid file path '{path}': Path outside allowed directories: {path}")

    return resolved


def resolve_source(source: str) -> str:
    """URLs pass through untouched; local paths are validated."""
    if not source or is_url(source):
        return source
    return str(validate_file_path(source))


# ==========================================
# LOGGING
# ==========================================

def setup_logging(verbose: bool = False, log_dir: Path = LOG_DIR) -> Path:
    """
    Configure the root logger with file and console handlers.

    Every run writes a timestamped DEBUG log under *log_dir*; the console
    shows warnings only, or info messages too when *verbose* is set.

    Returns:
        Path: The log file of this run.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = time.strftime('%Y%m%d_%H%M%S')
    log_file = log_dir / f"conflict_viz_{timestamp}.log"

    file_formatter = logging.Formatter(
        '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_formatter = logging.Formatter(
        '%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S'
    )

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(file_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    console_handler.setFormatter(console_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Called once per run; drop handlers left by an earlier call
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    return log_file


# ==========================================
# ARGUMENTS
# ==========================================

def parse_chart_list(value: str):
    """argparse type for --charts: comma-separated registered kinds, or 'all'."""
    if value.strip().lower() == 'all':
        return chart_kinds()
    kinds = [k.strip() for k in value.split(',') if k.strip()]
    unknown = [k for k in kinds if k not in chart_kinds()]
    if unknown:
        raise argparse.ArgumentTypeError(
            f"unknown chart kind(s): {', '.join(unknown)} (choose from {', '.join(chart_kinds())})")
    if not kinds:
        raise argparse.ArgumentTypeError("no chart kinds given")
    return kinds


def parse_args(argv=None):
    """Parse and return command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Conflict Viz - deaths in armed conflicts by type',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Chart kinds:
  {', '.join(chart_kinds())}

Examples:
  python run.py                              Render every chart to {DEFAULT_OUTPUT}
  python run.py --file data.csv --year 2022  Other dataset and snapshot year
  python run.py --charts bar,heatmap         Only some charts
  python run.py --dashboard --port 8502      Launch the streamlit dashboard
        """
    )

    parser.add_argument('--file', '-f', type=str, default=DATA_PATH,
                        help=f'Conflict deaths CSV, local path or URL (default: {DATA_PATH})')
    parser.add_argument('--geo', '-g', type=str, default=GEO_PATH,
                        help='Optional GeoJSON FeatureCollection with country boundaries')
    parser.add_argument('--output', '-o', type=str, default=DEFAULT_OUTPUT,
                        help=f'HTML report path (default: {DEFAULT_OUTPUT})')

    parser.add_argument('--year', '-y', type=int, default=SNAPSHOT_YEAR,
                        help=f'Snapshot year for single-year charts (default: {SNAPSHOT_YEAR})')
    parser.add_argument('--year-range', nargs=2, type=int, metavar=('START', 'END'),
                        help='Inclusive year range for time-based charts (default: all years)')
    parser.add_argument('--focus', nargs='+', metavar='ENTITY', default=None,
                        help='Entities compared by the grouped bar and time series charts')
    parser.add_argument('--top-n', type=int, default=TOP_N,
                        help=f'Countries kept by ranking charts (default: {TOP_N})')
    parser.add_argument('--charts', type=parse_chart_list, default=chart_kinds(),
                        help="Comma-separated chart kinds, or 'all' (default: all)")
    parser.add_argument('--log-scale', action='store_true',
                        help='Use log scales for skewed magnitudes')

    parser.add_argument('--dashboard', action='store_true',
                        help='Launch the streamlit dashboard instead of writing a report')
    parser.add_argument('--port', type=int, default=8501,
                        help='Port for the streamlit dashboard (default: 8501)')
    parser.add_argument('--no-browser', action='store_true',
                        help='Do not open a browser for the dashboard')

    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Show detailed logging output')

    args = parser.parse_args(argv)
    if args.top_n < 1:
        parser.error("--top-n must be at least 1")
    return args


# ==========================================
# REPORT MODE
# ==========================================

def build_report(args) -> bool:
    """Render the requested charts and write the HTML page.

    Returns:
        bool: False when the data could not be loaded (the page is still
              written, with the failure message in every section).
    """
    data_path = resolve_source(args.file)
    geo_path = resolve_source(args.geo)
    output = validate_file_path(args.output)

    requests = build_requests(
        args.charts,
        year=args.year,
        year_range=tuple(args.year_range) if args.year_range else None,
        focus=args.focus or (),
        top_n=args.top_n,
        log_scale=args.log_scale,
    )
    page = prepare_page([r.kind for r in requests], title=PAGE_TITLE)

    pipeline = ConflictChartPipeline(data_path, geo_path)
    ok = pipeline.run(requests, page)
    page.write_html(output)

    if ok:
        print(f"Rendered {len(page)} charts from {len(pipeline.records):,} rows -> {output}")
    else:
        print(f"Data could not be loaded; see {output} and the log for details")
    return ok


# ==========================================
# DASHBOARD MODE
# ==========================================

def launch_dashboard(port: int = 8501, open_browser: bool = True,
                     data_path: str = DATA_PATH, geo_path: str = GEO_PATH) -> bool:
    """
    Launch the streamlit dashboard as a managed subprocess.

    The data and geo paths reach the dashboard through environment variables
    read by conflict_viz.core.config.  The subprocess is terminated on exit.

    Returns:
        bool: True if the dashboard ran and exited cleanly (including Ctrl+C),
              False on errors.
    """
    dashboard_path = Path(__file__).parent / "dashboard.py"
    if not dashboard_path.exists():
        print(f"Error: Dashboard not found at {dashboard_path}")
        return False

    cmd = [
        sys.executable, "-m", "streamlit", "run",
        str(dashboard_path),
        "--server.port", str(port),
        "--server.headless", "true",
        "--browser.gatherUsageStats", "false",
        "--theme.base", "dark",
        "--theme.backgroundColor", "#0f172a",
        "--theme.textColor", "#E0E0E0",
    ]
    env = dict(os.environ)
    env["CONFLICT_DATA_PATH"] = data_path
    env["CONFLICT_GEO_PATH"] = geo_path or ""

    print(f"Starting streamlit on http://localhost:{port} (Ctrl+C to stop)")
    sys.stdout.flush()

    streamlit_process = None

    def cleanup():
        """Terminate the streamlit subprocess, killing it after 5 seconds."""
        if streamlit_process is not None and streamlit_process.poll() is None:
            streamlit_process.terminate()
            try:
                streamlit_process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                streamlit_process.kill()

    atexit.register(cleanup)

    try:
        streamlit_process = subprocess.Popen(cmd, env=env)
        if open_browser:
            time.sleep(3)
            webbrowser.open(f"http://localhost:{port}")
        streamlit_process.wait()
        return streamlit_process.returncode == 0
    except KeyboardInterrupt:
        print("\nDashboard stopped by user.")
        cleanup()
        return True
    except FileNotFoundError:
        print("Streamlit not found. Install with: pip install streamlit plotly")
        return False


def main(argv=None) -> int:
    """Parse arguments, configure logging and run the selected mode."""
    args = parse_args(argv)
    log_file = setup_logging(verbose=args.verbose)
    logger.info(f"Logging to {log_file}")

    try:
        if args.dashboard:
            ok = launch_dashboard(
                port=args.port,
                open_browser=not args.no_browser,
                data_path=resolve_source(args.file),
                geo_path=resolve_source(args.geo),
            )
        else:
            ok = build_report(args)
    except ValueError as e:
        print(f"Error: {e}")
        logger.error(str(e))
        return 2
    except KeyboardInterrupt:
        print("\nCancelled by user.")
        return 130

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
