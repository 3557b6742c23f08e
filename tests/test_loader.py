"""
Unit tests for data loading (conflict_viz.pipeline.loader)

HTTP access is mocked; local files are written to temporary directories.
"""

import json
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

from conflict_viz.core.exceptions import LoadError
from conflict_viz.pipeline.loader import (
    feature_code,
    geo_code_property,
    is_url,
    load_geojson,
    load_raw_records,
    normalize_feature_codes,
    parse_csv_text,
    read_text,
)
from tests.fixtures.sample_data import (
    SAMPLE_CSV,
    SAMPLE_HEADERS,
    create_sample_csv_file,
    create_sample_geojson,
    create_sample_geojson_file,
)


class TestParseCsv(unittest.TestCase):

    def test_headers_and_rows(self):
        headers, records = parse_csv_text(SAMPLE_CSV)
        self.assertEqual(headers, SAMPLE_HEADERS)
        self.assertEqual(len(records), 13)
        self.assertEqual(records[0]["Entity"], "Ukraine")

    def test_cells_stay_strings(self):
        _, records = parse_csv_text(SAMPLE_CSV)
        self.assertEqual(records[0]["Year"], "2023")
        self.assertEqual(records[-1]["Year"], "N/A")
        russia = [r for r in records if r["Entity"] == "Russia"][0]
        self.assertEqual(russia[SAMPLE_HEADERS[-1]], "")

    def test_empty_text(self):
        with self.assertRaises(LoadError):
            parse_csv_text("")

    def test_header_only(self):
        with self.assertRaises(LoadError) as context:
            parse_csv_text("Entity,Code,Year\n")
        self.assertIn("empty", str(context.exception))

    def test_trailing_comma_keeps_columns(self):
        text = ",".join(SAMPLE_HEADERS) + "\nUkraine,UKR,2023,0,50000,0,0,100,\n"
        headers, records = parse_csv_text(text)
        self.assertEqual(headers, SAMPLE_HEADERS)
        self.assertEqual(records[0]["Entity"], "Ukraine")
        self.assertEqual(records[0]["Code"], "UKR")
        self.assertEqual(records[0]["Year"], "2023")
        self.assertEqual(records[0][SAMPLE_HEADERS[-1]], "100")

    def test_unparseable(self):
        with self.assertRaises(LoadError):
            parse_csv_text('a,b\n"unterminated,1\n')


class TestReadText(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def test_is_url(self):
        self.assertTrue(is_url("https://example.org/data.csv"))
        self.assertTrue(is_url("HTTP://example.org/data.csv"))
        self.assertFalse(is_url("data/conflict_deaths_by_type.csv"))

    def test_local_file(self):
        path = create_sample_csv_file(self.test_dir / "deaths.csv")
        headers, records = load_raw_records(path)
        self.assertEqual(headers[0], "Entity")
        self.assertEqual(len(records), 13)

    def test_utf8_bom_is_stripped(self):
        path = self.test_dir / "bom.csv"
        path.write_bytes("\ufeffEntity,Code\nX,XXX\n".encode("utf-8"))
        headers, _ = load_raw_records(path)
        self.assertEqual(headers, ["Entity", "Code"])

    def test_missing_file(self):
        with self.assertRaises(LoadError) as context:
            read_text(self.test_dir / "missing.csv")
        self.assertIn("missing.csv", context.exception.source)

    def test_invalid_utf8(self):
        path = self.test_dir / "latin1.csv"
        path.write_bytes("Entity\nC\xf4te d'Ivoire\n".encode("latin-1"))
        with self.assertRaises(LoadError):
            read_text(path)

    @patch('conflict_viz.pipeline.loader.requests.get')
    def test_url_fetch(self, mock_get):
        response = MagicMock()
        response.content = SAMPLE_CSV.encode("utf-8")
        response.raise_for_status.return_value = None
        mock_get.return_value = response

        headers, records = load_raw_records("https://example.org/deaths.csv", timeout=5)

        mock_get.assert_called_once_with("https://example.org/deaths.csv", timeout=5)
        self.assertEqual(headers, SAMPLE_HEADERS)
        self.assertEqual(len(records), 13)

    @patch('conflict_viz.pipeline.loader.requests.get')
    def test_url_http_error(self, mock_get):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("404 Not Found")
        mock_get.return_value = response

        with self.assertRaises(LoadError) as context:
            read_text("https://example.org/missing.csv")
        self.assertIn("404", str(context.exception))

    @patch('conflict_viz.pipeline.loader.requests.get')
    def test_url_connection_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(LoadError):
            read_text("http://localhost:1/deaths.csv")


class TestGeoJson(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def test_load_feature_collection(self):
        path = create_sample_geojson_file(self.test_dir / "world.geojson")
        geo = load_geojson(path)
        self.assertEqual(len(geo["features"]), 5)
        self.assertEqual(geo_code_property(geo), "iso_a3")

    def test_upper_case_property(self):
        geo = create_sample_geojson(code_property="ISO_A3")
        self.assertEqual(geo_code_property(geo), "ISO_A3")
        self.assertEqual(feature_code(geo["features"][0], "ISO_A3"), "UKR")

    def test_feature_id_fallback(self):
        geo = {"type": "FeatureCollection",
               "features": [{"type": "Feature", "id": "ukr", "properties": {}, "geometry": None}]}
        self.assertEqual(geo_code_property(geo), "id")
        self.assertEqual(feature_code(geo["features"][0], "id"), "UKR")

    def test_normalize_feature_codes(self):
        geo = create_sample_geojson()
        geo["features"][0]["properties"]["iso_a3"] = " ukr "
        geo["features"][1]["properties"]["iso_a3"] = None
        self.assertEqual(normalize_feature_codes(geo, "iso_a3"), 4)
        self.assertEqual(geo["features"][0]["properties"]["iso_a3"], "UKR")
        self.assertIsNone(geo["features"][1]["properties"]["iso_a3"])

    def test_normalize_feature_ids(self):
        geo = {"type": "FeatureCollection",
               "features": [{"type": "Feature", "id": "sdn", "properties": {}, "geometry": None}]}
        self.assertEqual(normalize_feature_codes(geo, "id"), 1)
        self.assertEqual(geo["features"][0]["id"], "SDN")

    def test_no_codes(self):
        geo = {"type": "FeatureCollection", "features": [{"type": "Feature", "properties": {"name": "x"}}]}
        self.assertIsNone(geo_code_property(geo))

    def test_not_a_feature_collection(self):
        path = self.test_dir / "point.geojson"
        path.write_text(json.dumps({"type": "Point", "coordinates": [0, 0]}))
        with self.assertRaises(LoadError):
            load_geojson(path)

    def test_invalid_json(self):
        path = self.test_dir / "broken.geojson"
        path.write_text("{not json")
        with self.assertRaises(LoadError):
            load_geojson(path)


if __name__ == '__main__':
    unittest.main()
