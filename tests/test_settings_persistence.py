"""Unit tests for page settings persistence."""

import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from folio.config import PageSettings
from folio.settings_persistence import SettingsPersistence
from folio.view_mode import ViewMode


class TestSettingsPersistence(unittest.TestCase):
    """Test settings persistence functionality."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.persistence = SettingsPersistence(config_dir=Path(self.temp_dir))
        self.test_doc_path = os.path.join(self.temp_dir, "conclusions.txt")

    def tearDown(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_save_and_load_settings(self):
        settings = PageSettings(view_mode=ViewMode.PAGE, zoom=1.2, pages_per_row=2)
        self.assertTrue(self.persistence.save(self.test_doc_path, settings))
        self.assertEqual(self.persistence.load(self.test_doc_path), settings)

    def test_load_survives_new_instance(self):
        settings = PageSettings(view_mode=ViewMode.CONTINUOUS)
        self.persistence.save(self.test_doc_path, settings)
        fresh = SettingsPersistence(config_dir=Path(self.temp_dir))
        self.assertEqual(fresh.load(self.test_doc_path).view_mode, ViewMode.CONTINUOUS)

    def test_load_nonexistent_document(self):
        self.assertEqual(self.persistence.load("/nonexistent/document.txt"), PageSettings())

    def test_save_with_none_document_path(self):
        self.assertFalse(self.persistence.save(None, PageSettings()))
        self.assertEqual(self.persistence.load(None), PageSettings())

    def test_paths_are_normalized(self):
        settings = PageSettings(zoom=0.8)
        self.persistence.save(self.test_doc_path, settings)
        relative = os.path.relpath(self.test_doc_path)
        self.assertEqual(self.persistence.load(relative).zoom, 0.8)

    def test_corrupted_file_gives_defaults(self):
        with open(self.persistence.settings_file, "w", encoding="utf-8") as f:
            f.write("{not json")
        with self.assertLogs("folio.settings_persistence", level="WARNING"):
            loaded = self.persistence.load(self.test_doc_path)
        self.assertEqual(loaded, PageSettings())

    def test_non_dict_file_is_ignored(self):
        with open(self.persistence.settings_file, "w", encoding="utf-8") as f:
            json.dump([1, 2, 3], f)
        self.assertEqual(self.persistence.load(self.test_doc_path), PageSettings())

    def test_invalid_entries_fall_back_to_defaults(self):
        record = PageSettings().to_dict()
        record["zoom"] = "huge"
        with open(self.persistence.settings_file, "w", encoding="utf-8") as f:
            json.dump({os.path.abspath(self.test_doc_path): record}, f)
        self.assertEqual(self.persistence.load(self.test_doc_path).zoom, 1.0)

    def test_atomic_write_leaves_no_temp_file(self):
        self.persistence.save(self.test_doc_path, PageSettings())
        self.assertTrue(self.persistence.settings_file.exists())
        self.assertFalse(self.persistence.settings_file.with_suffix(".tmp").exists())

    def test_failed_write_is_reported(self):
        with patch("folio.settings_persistence.json.dump", side_effect=OSError("disk full")):
            self.assertFalse(self.persistence.save(self.test_doc_path, PageSettings()))
        self.assertFalse(self.persistence.settings_file.with_suffix(".tmp").exists())

    def test_forget(self):
        self.persistence.save(self.test_doc_path, PageSettings(zoom=1.5))
        self.assertTrue(self.persistence.forget(self.test_doc_path))
        self.assertFalse(self.persistence.forget(self.test_doc_path))
        self.assertEqual(self.persistence.load(self.test_doc_path), PageSettings())

    def test_multiple_documents(self):
        other = os.path.join(self.temp_dir, "assignation.txt")
        self.persistence.save(self.test_doc_path, PageSettings(zoom=0.5))
        self.persistence.save(other, PageSettings(zoom=2.0))
        self.persistence.clear_cache()
        self.assertEqual(self.persistence.load(self.test_doc_path).zoom, 0.5)
        self.assertEqual(self.persistence.load(other).zoom, 2.0)

    def test_default_location_uses_platformdirs(self):
        with patch("folio.settings_persistence.platformdirs.user_config_dir",
                   return_value=self.temp_dir) as mock_dir:
            persistence = SettingsPersistence()
        mock_dir.assert_called_once_with("folio", "folio")
        self.assertEqual(persistence.settings_file,
                         Path(self.temp_dir) / "page_settings.json")


if __name__ == "__main__":
    unittest.main()
