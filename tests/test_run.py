"""
Unit tests for run.py

Tests the functions of the run.py entry point script:
- Path validation and security
- Argument parsing and chart selection
- Logging setup
- Report generation and exit codes
- Dashboard launching
"""

import argparse
import logging
import unittest
from unittest.mock import patch, MagicMock
from pathlib import Path
import sys
import tempfile
import shutil

# Add parent directory to path to import run module
sys.path.insert(0, str(Path(__file__).parent.parent))

import run
from conflict_viz.core.config import DEFAULT_OUTPUT, SNAPSHOT_YEAR, TOP_N
from conflict_viz.visualization.registry import chart_kinds
from tests.fixtures.sample_data import create_sample_csv_file

PROJECT_ROOT = Path(run.__file__).parent.resolve()


class TestPathValidation(unittest.TestCase):
    """Test suite for path validation and security functions."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(dir=PROJECT_ROOT))
        self.test_file = create_sample_csv_file(self.test_dir / "deaths.csv")

    def tearDown(self):
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def test_validate_existing_file(self):
        """Test validation of existing file."""
        result = run.validate_file_path(str(self.test_file), must_exist=True)
        self.assertIsInstance(result, Path)
        self.assertTrue(result.exists())

    def test_validate_nonexistent_file_without_requirement(self):
        """Test validation of non-existent file when existence not required."""
        result = run.validate_file_path(str(self.test_dir / "charts.html"), must_exist=False)
        self.assertEqual(result.name, "charts.html")

    def test_validate_nonexistent_file_with_requirement(self):
        """Test validation fails for non-existent file when existence required."""
        with self.assertRaises(ValueError) as context:
            run.validate_file_path(str(self.test_dir / "missing.csv"), must_exist=True)
        self.assertIn("File not found", str(context.exception))

    def test_prevent_path_traversal(self):
        """Test prevention of path traversal outside the allowed roots."""
        with patch.object(run.Path, 'home', return_value=PROJECT_ROOT):
            with self.assertRaises(ValueError) as context:
                run.validate_file_path(str(PROJECT_ROOT / ".." / ".." / "etc" / "passwd"))
        self.assertIn("outside allowed directories", str(context.exception))

    def test_relative_path_resolves(self):
        """Test relative paths are resolved to absolute ones."""
        result = run.validate_file_path("conflict_charts.html")
        self.assertTrue(result.is_absolute())

    def test_urls_pass_through(self):
        """Test URLs skip path validation."""
        url = "https://example.org/deaths.csv"
        self.assertEqual(run.resolve_source(url), url)
        self.assertEqual(run.resolve_source(""), "")


class TestParseArgs(unittest.TestCase):
    """Test suite for command-line parsing."""

    def test_defaults(self):
        args = run.parse_args([])
        self.assertEqual(args.year, SNAPSHOT_YEAR)
        self.assertEqual(args.top_n, TOP_N)
        self.assertEqual(args.charts, chart_kinds())
        self.assertEqual(args.output, DEFAULT_OUTPUT)
        self.assertIsNone(args.year_range)
        self.assertFalse(args.dashboard)

    def test_chart_list(self):
        args = run.parse_args(['--charts', 'bar, waffle,choropleth'])
        self.assertEqual(args.charts, ['bar', 'waffle', 'choropleth'])

    def test_chart_list_all(self):
        self.assertEqual(run.parse_chart_list('ALL'), chart_kinds())

    def test_unknown_chart(self):
        with self.assertRaises(argparse.ArgumentTypeError) as context:
            run.parse_chart_list('bar,pie')
        self.assertIn("pie", str(context.exception))

    def test_unknown_chart_exits(self):
        with patch('sys.stderr'):
            with self.assertRaises(SystemExit):
                run.parse_args(['--charts', 'pie'])

    def test_top_n_must_be_positive(self):
        with patch('sys.stderr'):
            with self.assertRaises(SystemExit) as context:
                run.parse_args(['--top-n', '0'])
        self.assertEqual(context.exception.code, 2)

    def test_focus_and_range(self):
        args = run.parse_args(['--focus', 'Ukraine', 'Sudan', '--year-range', '1990', '2000', '--log-scale'])
        self.assertEqual(args.focus, ['Ukraine', 'Sudan'])
        self.assertEqual(args.year_range, [1990, 2000])
        self.assertTrue(args.log_scale)


class TestSetupLogging(unittest.TestCase):
    """Test suite for logging configuration."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.root_logger = logging.getLogger()
        self.saved_handlers = self.root_logger.handlers[:]
        self.saved_level = self.root_logger.level

    def tearDown(self):
        for handler in self.root_logger.handlers[:]:
            self.root_logger.removeHandler(handler)
            handler.close()
        for handler in self.saved_handlers:
            self.root_logger.addHandler(handler)
        self.root_logger.setLevel(self.saved_level)
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def test_creates_log_file(self):
        log_file = run.setup_logging(log_dir=self.test_dir / "logs")
        self.assertTrue(log_file.exists())
        self.assertTrue(log_file.name.startswith("conflict_viz_"))

    def test_console_level(self):
        run.setup_logging(verbose=False, log_dir=self.test_dir)
        console = [h for h in self.root_logger.handlers if not isinstance(h, logging.FileHandler)]
        self.assertEqual(console[0].level, logging.WARNING)

        run.setup_logging(verbose=True, log_dir=self.test_dir)
        console = [h for h in self.root_logger.handlers if not isinstance(h, logging.FileHandler)]
        self.assertEqual(len(self.root_logger.handlers), 2)
        self.assertEqual(console[0].level, logging.INFO)


class TestReport(unittest.TestCase):
    """Test suite for report mode and exit codes."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(dir=PROJECT_ROOT))
        self.csv_path = create_sample_csv_file(self.test_dir / "deaths.csv")
        self.output = self.test_dir / "charts.html"

    def tearDown(self):
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    @patch('builtins.print')
    def test_build_report_writes_html(self, mock_print):
        args = run.parse_args(['--file', str(self.csv_path), '--output', str(self.output),
                               '--charts', 'bar,waffle', '--geo', ''])
        self.assertTrue(run.build_report(args))
        html = self.output.read_text(encoding='utf-8')
        self.assertIn('id="bar"', html)
        self.assertIn('id="waffle"', html)

    @patch('builtins.print')
    def test_build_report_load_failure_still_writes(self, mock_print):
        args = run.parse_args(['--file', str(self.test_dir / "missing.csv"), '--output', str(self.output),
                               '--geo', ''])
        self.assertFalse(run.build_report(args))
        self.assertIn("Failed to load the CSV", self.output.read_text(encoding='utf-8'))

    @patch('run.setup_logging', return_value=Path("test.log"))
    @patch('builtins.print')
    def test_main_exit_codes(self, mock_print, mock_logging):
        ok = run.main(['--file', str(self.csv_path), '--output', str(self.output), '--charts', 'bar', '--geo', ''])
        self.assertEqual(ok, 0)

        failed = run.main(['--file', str(self.test_dir / "missing.csv"), '--output', str(self.output),
                           '--geo', ''])
        self.assertEqual(failed, 1)

    @patch('run.setup_logging', return_value=Path("test.log"))
    @patch('builtins.print')
    def test_main_rejects_outside_paths(self, mock_print, mock_logging):
        with patch.object(run.Path, 'home', return_value=PROJECT_ROOT):
            code = run.main(['--file', str(self.csv_path), '--output', '/nonexistent-root/charts.html', '--geo', ''])
        self.assertEqual(code, 2)

    @patch('run.build_report', side_effect=KeyboardInterrupt)
    @patch('run.setup_logging', return_value=Path("test.log"))
    @patch('builtins.print')
    def test_main_keyboard_interrupt(self, mock_print, mock_logging, mock_report):
        self.assertEqual(run.main([]), 130)


class TestLaunchDashboard(unittest.TestCase):
    """Test suite for the streamlit subprocess launcher."""

    @patch('run.atexit.register')
    @patch('run.webbrowser.open')
    @patch('run.time.sleep')
    @patch('run.subprocess.Popen')
    @patch('builtins.print')
    def test_launch(self, mock_print, mock_popen, mock_sleep, mock_open, mock_register):
        process = MagicMock()
        process.returncode = 0
        mock_popen.return_value = process

        self.assertTrue(run.launch_dashboard(port=8600, data_path="data.csv", geo_path="world.geojson"))

        cmd = mock_popen.call_args[0][0]
        env = mock_popen.call_args[1]['env']
        self.assertIn("streamlit", cmd)
        self.assertIn("8600", cmd)
        self.assertEqual(env["CONFLICT_DATA_PATH"], "data.csv")
        self.assertEqual(env["CONFLICT_GEO_PATH"], "world.geojson")
        mock_open.assert_called_once_with("http://localhost:8600")
        mock_register.assert_called_once()

    @patch('run.atexit.register')
    @patch('run.subprocess.Popen', side_effect=FileNotFoundError)
    @patch('builtins.print')
    def test_streamlit_missing(self, mock_print, mock_popen, mock_register):
        self.assertFalse(run.launch_dashboard(open_browser=False))

    @patch('run.launch_dashboard', return_value=True)
    @patch('run.setup_logging', return_value=Path("test.log"))
    def test_main_dashboard_mode(self, mock_logging, mock_launch):
        code = run.main(['--dashboard', '--port', '8700', '--no-browser', '--file', 'https://example.org/d.csv'])
        self.assertEqual(code, 0)
        kwargs = mock_launch.call_args[1]
        self.assertEqual(kwargs['port'], 8700)
        self.assertFalse(kwargs['open_browser'])
        self.assertEqual(kwargs['data_path'], 'https://example.org/d.csv')


if __name__ == '__main__':
    unittest.main()
