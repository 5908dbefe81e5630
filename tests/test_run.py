from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from sqlmodel import select

from personnel import config
from personnel.models import DocumentArtifact, get_session, reset_engine
from personnel.render.run import load_record, run_batch
from personnel.storage import record_slug


RECORD = {
    "user_id": "abcdef1234567890",
    "first_name": "José",
    "last_name": "Müller",
    "date_of_birth": "1990-05-17",
    "street_address": "Hauptstraße 1",
    "postal_code": "50667",
    "city": "Köln",
    "iban": "DE89370400440532013000",
    "bic": "COBADEFFXXX",
    "employment_type": ["hauptbeschäftigung"],
    "is_complete": True,
}


class BatchRunTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.records = self.root / "records"
        self.records.mkdir()
        config.set_out_dir(self.root / "out")
        reset_engine()

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _write(self, name: str, payload) -> Path:
        path = self.records / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    def test_load_record_validates(self) -> None:
        record = load_record(self._write("a.json", RECORD))
        self.assertEqual(record.last_name, "Müller")
        self.assertEqual(record.employment_type, ["hauptbeschäftigung"])

    def test_batch_renders_and_records_artifacts(self) -> None:
        paths = [
            self._write("complete.json", RECORD),
            self._write("draft.json", {**RECORD, "user_id": "ffff0000", "is_complete": False}),
            self._write("broken.json", {"first_name": "Nur"}),
        ]
        results = run_batch(paths)
        self.assertEqual(len(results["READY"]), 1)
        self.assertEqual(results["SKIPPED"], ["draft.json"])
        self.assertEqual(len(results["FAILED"]), 1)
        self.assertTrue(results["READY"][0].endswith("_Personaldaten_ABCDEF12_Jose_Muller.pdf"))

        pdfs = list((self.root / "out").glob("*/*.pdf"))
        self.assertEqual(len(pdfs), 1)
        self.assertEqual(pdfs[0].read_bytes()[:4], b"%PDF")

        with get_session() as session:
            artifacts = list(session.exec(select(DocumentArtifact)))
        self.assertEqual(len(artifacts), 1)
        self.assertEqual(artifacts[0].user_id, "abcdef1234567890")
        self.assertEqual(artifacts[0].page_count, 1)

    def test_artifact_timestamp_is_timezone_aware(self) -> None:
        run_batch([self._write("a.json", RECORD)])
        with get_session() as session:
            artifact = session.exec(select(DocumentArtifact)).one()
        self.assertIsNotNone(artifact.created_at)
        fresh = DocumentArtifact(file_name="a.pdf", path="a.pdf", page_count=1)
        self.assertIsNotNone(fresh.created_at.tzinfo)

    def test_symbol_only_names_do_not_abort_batch(self) -> None:
        paths = [
            self._write("symbols.json", {**RECORD, "user_id": None, "first_name": "-", "last_name": "?"}),
            self._write("valid.json", RECORD),
        ]
        results = run_batch(paths)
        self.assertEqual(len(results["READY"]), 2)
        self.assertEqual(results["FAILED"], [])
        self.assertTrue(any(name.endswith("_XXXXXXXX_-_.pdf") for name in results["READY"]))

    def test_symbol_only_slug_falls_back_to_hash(self) -> None:
        record = load_record(self._write("s.json", {**RECORD, "user_id": None, "first_name": "-", "last_name": "?"}))
        slug = record_slug(record)
        self.assertEqual(len(slug), 12)
        self.assertEqual(slug, record_slug(record))

    def test_incomplete_records_can_be_included(self) -> None:
        path = self._write("draft.json", {**RECORD, "is_complete": False})
        results = run_batch([path], include_incomplete=True)
        self.assertEqual(len(results["READY"]), 1)


if __name__ == "__main__":
    unittest.main()
