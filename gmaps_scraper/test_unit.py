#!/usr/bin/env python3
"""
Unit tests for matchers, models, persistence and export.
This uses Python's built-in unittest framework.
"""
import os
import tempfile
import unittest

from gmaps_scraper.database import db_connect, db_get_place, db_init, upsert_place, upsert_places
from gmaps_scraper.export import EXPORT_COLUMNS, export_new_since_run, places_to_frame, save_output_rows, to_csv_text
from gmaps_scraper.models import CollectionState, PlaceRecord
from gmaps_scraper.utils import (
    build_search_url,
    clean_text,
    looks_like_domain,
    looks_like_phone,
    parse_rating,
    parse_review_count,
    strip_tel_scheme,
    text_or_none,
)


def make_record(**overrides) -> PlaceRecord:
    data = dict(
        query="coffee london",
        maps_url="https://www.google.com/maps/place/Prufrock+Coffee/data=!4m7",
        scraped_at="2026-01-01T00:00:00+00:00",
        name="Prufrock Coffee",
        address="23-25 Leather Ln, London EC1N 7TE",
        phone="020 7242 0467",
        website="prufrockcoffee.com",
        rating="4.6",
        reviews="1234",
    )
    data.update(overrides)
    return PlaceRecord(**data)


class TestMatchers(unittest.TestCase):
    """Pattern matchers used by the field extractor."""

    def test_phone_shapes(self):
        self.assertTrue(looks_like_phone("+44 20 7946 0958"))
        self.assertTrue(looks_like_phone("(510) 653-3394"))
        self.assertTrue(looks_like_phone("555.123.4567"))
        self.assertTrue(looks_like_phone("Phone: 020 7242 0467"))

    def test_not_phones(self):
        self.assertFalse(looks_like_phone(None))
        self.assertFalse(looks_like_phone(""))
        self.assertFalse(looks_like_phone("Open 24 hours"))
        self.assertFalse(looks_like_phone("1 2 3 4"))
        self.assertFalse(looks_like_phone("CA 94111"))

    def test_long_postal_codes_read_as_phones(self):
        # known gap: address blocks come first, so these win the phone field
        self.assertTrue(looks_like_phone("Av. Paulista, 1000 - Bela Vista, 01310-200"))
        self.assertTrue(looks_like_phone("〒100-0005 Tokyo"))
        self.assertFalse(looks_like_phone("London EC1N 7TE"))

    def test_domain(self):
        self.assertTrue(looks_like_domain("prufrockcoffee.com"))
        self.assertTrue(looks_like_domain(" shop.example.co.uk "))
        self.assertFalse(looks_like_domain("555.123.4567"))
        self.assertFalse(looks_like_domain("23 Main St. London"))
        self.assertFalse(looks_like_domain("no dots here"))

    def test_rating(self):
        self.assertEqual(parse_rating("4.6 stars"), "4.6")
        self.assertEqual(parse_rating("Rated 5 stars out of 5"), "5")
        self.assertEqual(parse_rating(None, "4.2"), "4.2")
        self.assertEqual(parse_rating("stars", "3.9 (120)"), "3.9")
        self.assertIsNone(parse_rating(None, None))
        self.assertIsNone(parse_rating("", "no rating"))

    def test_review_count(self):
        self.assertEqual(parse_review_count("1,234 reviews"), "1234")
        self.assertEqual(parse_review_count("1 review"), "1")
        self.assertEqual(parse_review_count("87 Reviews"), "87")
        self.assertIsNone(parse_review_count("Write a review"))
        self.assertIsNone(parse_review_count(None))

    def test_tel_scheme(self):
        self.assertEqual(strip_tel_scheme("tel:+442079460958"), "+442079460958")
        self.assertEqual(strip_tel_scheme("TEL:+1%20555%20123%204567"), "+1 555 123 4567")
        self.assertEqual(strip_tel_scheme(None), "")

    def test_text_cleaning(self):
        self.assertEqual(clean_text("  Blue   Bottle \n Coffee "), "Blue Bottle Coffee")
        self.assertEqual(clean_text(None), "")
        self.assertIsNone(text_or_none("   "))
        self.assertEqual(text_or_none(" x "), "x")

    def test_search_url(self):
        url = build_search_url("coffee shop London")
        self.assertEqual(
            url,
            "https://www.google.com/maps/search/coffee%20shop%20London?ucbcb=1&hl=en&authuser=0",
        )
        self.assertIn("caf%C3%A9%20%26%20bar", build_search_url("café & bar"))


class TestModels(unittest.TestCase):
    """PlaceRecord and CollectionState behaviour."""

    def test_record_wire_format(self):
        rec = make_record(website=None)
        d = rec.to_dict()
        self.assertEqual(d["mapsUrl"], rec.maps_url)
        self.assertEqual(d["scrapedAt"], rec.scraped_at)
        self.assertIsNone(d["website"])
        self.assertEqual(rec.key, rec.maps_url)

    def test_record_key_falls_back_to_name(self):
        self.assertEqual(make_record(maps_url="").key, "Prufrock Coffee")

    def test_collection_state_dedupes_in_order(self):
        state = CollectionState()
        for href in ["b", "a", "b", None, "", "c", "a"]:
            state.add(href)
        self.assertEqual(list(state.seen), ["b", "a", "c"])

    def test_collection_state_stagnation(self):
        state = CollectionState()
        state.record_extent(0)
        self.assertEqual(state.stagnation, 1)
        state.record_extent(1200)
        self.assertEqual(state.stagnation, 0)
        state.record_extent(1200)
        state.record_extent(1200)
        self.assertEqual(state.stagnation, 2)


class TestDatabase(unittest.TestCase):
    """Upsert semantics of the places table."""

    def setUp(self):
        self.conn = db_connect(":memory:")
        db_init(self.conn)

    def tearDown(self):
        self.conn.close()

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM places").fetchone()[0]

    def test_upsert_replaces_by_maps_url(self):
        first = make_record()
        second = make_record(name="Prufrock Coffee Ltd", phone=None, rating="4.7")

        self.assertTrue(upsert_place(self.conn, first))
        self.assertFalse(upsert_place(self.conn, second))

        self.assertEqual(self.count(), 1)
        row = db_get_place(self.conn, first.maps_url)
        self.assertEqual(row["name"], "Prufrock Coffee Ltd")
        self.assertIsNone(row["phone"])
        self.assertEqual(row["rating"], "4.7")
        self.assertLessEqual(row["first_seen"], row["last_seen"])

    def test_upsert_is_idempotent(self):
        rec = make_record()
        upsert_place(self.conn, rec)
        upsert_place(self.conn, rec)
        self.assertEqual(self.count(), 1)

    def test_name_used_when_url_missing(self):
        upsert_place(self.conn, make_record(maps_url=""))
        upsert_place(self.conn, make_record(maps_url="", address="elsewhere"))
        self.assertEqual(self.count(), 1)
        self.assertEqual(db_get_place(self.conn, "Prufrock Coffee")["address"], "elsewhere")

    def test_record_without_key_is_rejected(self):
        with self.assertRaises(ValueError):
            upsert_place(self.conn, make_record(maps_url="", name=None))

    def test_batch_counts(self):
        upsert_place(self.conn, make_record())
        new, updated = upsert_places(self.conn, [
            make_record(),
            make_record(maps_url="https://www.google.com/maps/place/Other"),
        ])
        self.assertEqual((new, updated), (1, 1))
        self.assertEqual(self.count(), 2)


class TestExport(unittest.TestCase):
    """CSV export layout."""

    def test_frame_columns_and_blanks(self):
        df = places_to_frame([make_record(phone=None)])
        self.assertEqual(list(df.columns), EXPORT_COLUMNS)
        self.assertEqual(df.iloc[0]["phone"], "")
        self.assertEqual(df.iloc[0]["mapsUrl"], make_record().maps_url)

    def test_csv_fields_are_quoted(self):
        text = to_csv_text(places_to_frame([make_record(website=None)]))
        lines = text.splitlines()
        self.assertEqual(lines[0], ",".join(f'"{c}"' for c in EXPORT_COLUMNS))
        self.assertTrue(lines[1].startswith('"coffee london","Prufrock Coffee",'))
        self.assertIn('"020 7242 0467","","4.6","1234"', lines[1])

    def test_empty_export_has_header(self):
        lines = to_csv_text(places_to_frame([])).splitlines()
        self.assertEqual(len(lines), 1)

    def test_save_and_export_new(self):
        conn = db_connect(":memory:")
        db_init(conn)
        upsert_places(conn, [make_record()])
        df = export_new_since_run(conn, "2000-01-01T00:00:00+00:00")
        conn.close()
        self.assertEqual(len(df), 1)
        self.assertEqual(df.iloc[0]["mapsUrl"], make_record().maps_url)

        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "out.csv")
            save_output_rows([make_record()], out)
            with open(out, encoding="utf-8") as f:
                self.assertTrue(f.readline().startswith('"query","name"'))


class TestCli(unittest.TestCase):
    """Command line parsing."""

    def test_defaults(self):
        from gmaps_scraper.cli import parse_args

        args = parse_args(["--query", "coffee london"])
        self.assertEqual(args.query, "coffee london")
        self.assertEqual(args.limit, 20)
        self.assertFalse(args.headed)
        self.assertFalse(args.export_new)
        self.assertEqual(args.out, "scraped_results.csv")

    def test_query_required(self):
        from gmaps_scraper.cli import parse_args

        with self.assertRaises(SystemExit):
            parse_args([])


if __name__ == "__main__":
    unittest.main(verbosity=2)
