"""
Integration tests for the pipeline orchestrator (conflict_viz.pipeline.orchestrator)
"""

import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from conflict_viz.core.config import MSG_LOAD_FAILED, MSG_MISSING_COLUMNS
from conflict_viz.core.exceptions import UnknownChartError
from conflict_viz.pipeline.orchestrator import (
    ConflictChartPipeline,
    build_requests,
    prepare_page,
    run_pipeline,
)
from conflict_viz.visualization.containers import ERROR
from conflict_viz.visualization.registry import chart_kinds
from tests.fixtures.sample_data import (
    SAMPLE_HEADERS,
    UKRAINE_2023_TOTAL,
    create_sample_csv_file,
    create_sample_geojson,
    create_sample_geojson_file,
)


class TestBuildRequests(unittest.TestCase):

    def test_defaults_to_every_chart(self):
        requests = build_requests()
        self.assertEqual([r.kind for r in requests], chart_kinds())

    def test_shared_parameters(self):
        requests = build_requests(['bar', 'heatmap'], year=2022, year_range=(2000, 2010),
                                  focus=['Sudan'], top_n=5, log_scale=True)
        for request in requests:
            self.assertEqual((request.year, request.year_range, request.focus, request.top_n, request.log_scale),
                             (2022, (2000, 2010), ('Sudan',), 5, True))

    def test_unknown_kind(self):
        with self.assertRaises(UnknownChartError):
            build_requests(['bar', 'pie'])


class TestConflictChartPipeline(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.csv_path = create_sample_csv_file(self.test_dir / "deaths.csv")

    def tearDown(self):
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def test_end_to_end(self):
        requests = build_requests(year=2023)
        page = prepare_page([r.kind for r in requests])
        pipeline = ConflictChartPipeline(self.csv_path)

        self.assertTrue(pipeline.run(requests, page))
        self.assertEqual(len(pipeline.records), 13)
        self.assertTrue(all(container.figure is not None for container in page))

        bar = page['bar'].figure.data[0]
        self.assertEqual(bar.y[0], 'Ukraine')
        self.assertEqual(bar.x[0], UKRAINE_2023_TOTAL)

    def test_missing_file_fails_every_container(self):
        path = self.test_dir / "missing.csv"
        page = run_pipeline(path, kinds=['bar', 'heatmap', 'waffle'])
        expected = MSG_LOAD_FAILED.format(path=str(path))
        self.assertEqual(len(page), 3)
        for container in page:
            self.assertEqual((container.level, container.message), (ERROR, expected))

    def test_missing_columns_fails_every_container(self):
        path = create_sample_csv_file(self.test_dir / "bad.csv", text="Name,Value\nUkraine,1\n")
        page = run_pipeline(path, kinds=['bar', 'stacked'])
        for container in page:
            self.assertEqual(container.message, MSG_MISSING_COLUMNS)

    def test_geo_boundaries_feed_choropleth(self):
        geo_path = create_sample_geojson_file(self.test_dir / "world.geojson")
        page = run_pipeline(self.csv_path, geo_path, kinds=['choropleth'], year=2023)
        trace = page['choropleth'].figure.data[0]
        self.assertEqual(trace.featureidkey, 'properties.iso_a3')

    def test_geo_without_codes_is_ignored(self):
        geo = create_sample_geojson(code_property="name_only")
        for feature in geo["features"]:
            feature["properties"] = {"label": feature["properties"]["name"]}
        geo_path = create_sample_geojson_file(self.test_dir / "plain.geojson", geo=geo)
        pipeline = ConflictChartPipeline(self.csv_path, geo_path)
        pipeline.load_data()
        with self.assertLogs('conflict_viz.pipeline.orchestrator', level='WARNING'):
            self.assertIsNone(pipeline.load_geo())
        self.assertFalse(pipeline.render_context().has_geo)

    def test_trailing_commas_load_as_countries(self):
        text = ",".join(SAMPLE_HEADERS) + "\nUkraine,UKR,2023,0,50000,0,0,100,\nWorld,OWID_WRL,2023,0,83500,0,7000,4800,\n"
        path = create_sample_csv_file(self.test_dir / "trailing.csv", text=text)
        pipeline = ConflictChartPipeline(path)
        ukraine = pipeline.load_data()[0]
        self.assertEqual((ukraine.entity, ukraine.code, ukraine.year, ukraine.total),
                         ("Ukraine", "UKR", 2023, UKRAINE_2023_TOTAL))
        self.assertTrue(ukraine.is_country)

    def test_lowercase_geo_ids_join(self):
        geo = {"type": "FeatureCollection", "features": [
            dict(feature, id=feature["properties"]["iso_a3"].lower(), properties={"name": feature["properties"]["name"]})
            for feature in create_sample_geojson()["features"]
        ]}
        geo_path = create_sample_geojson_file(self.test_dir / "ids.geojson", geo=geo)
        page = run_pipeline(self.csv_path, geo_path, kinds=["choropleth"], year=2023)
        trace = page["choropleth"].figure.data[0]
        self.assertEqual(trace.featureidkey, "id")
        feature_ids = {f["id"] for f in trace.geojson["features"]}
        self.assertIn("UKR", feature_ids)
        self.assertTrue(set(trace.locations) & feature_ids)

    def test_broken_geo_fails_every_container(self):
        geo_path = self.test_dir / "broken.geojson"
        geo_path.write_text("{")
        page = run_pipeline(self.csv_path, geo_path, kinds=['bar', 'choropleth'])
        for container in page:
            self.assertEqual(container.level, ERROR)
            self.assertIn("geo boundaries", container.message)

    @patch('conflict_viz.pipeline.loader.requests.get')
    def test_url_source(self, mock_get):
        mock_get.return_value.content = self.csv_path.read_bytes()
        mock_get.return_value.raise_for_status.return_value = None
        page = run_pipeline("https://example.org/deaths.csv", kinds=['bar'], year=2023, timeout=3)
        mock_get.assert_called_once_with("https://example.org/deaths.csv", timeout=3)
        self.assertIsNotNone(page['bar'].figure)

    def test_year_without_data_shows_messages(self):
        page = run_pipeline(self.csv_path, kinds=['bar', 'waffle', 'heatmap'], year=1900, year_range=(1900, 1901))
        self.assertEqual(page['bar'].message, "No country data for year 1900.")
        self.assertEqual(page['waffle'].message, "No World aggregate for 1900.")
        self.assertEqual(page['heatmap'].message, "No World aggregate rows found between 1900 and 1901.")

    def test_write_html(self):
        page = run_pipeline(self.csv_path, kinds=['bar', 'waffle'], year=2023)
        output = page.write_html(self.test_dir / "out" / "charts.html")
        text = output.read_text(encoding='utf-8')
        self.assertIn('id="waffle"', text)
        self.assertIn('<html>', text)


if __name__ == '__main__':
    unittest.main()
