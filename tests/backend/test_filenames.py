import pytest
import re

from image_service.filenames import build_storage_key, normalize_filename


@pytest.mark.unit
class TestNormalizeFilename:
    """Test suite for filename normalization."""

    def test_strips_special_characters(self):
        assert normalize_filename("My Photo!!.JPG") == "my_photo.jpg"

    def test_collapses_whitespace_runs(self):
        assert normalize_filename("  multi   space.png") == "multi_space.png"

    def test_tabs_and_newlines_become_one_underscore(self):
        assert normalize_filename("a\t\n b.gif") == "a_b.gif"

    def test_keeps_dots_hyphens_and_underscores(self):
        assert normalize_filename("holiday-2024_v1.final.jpeg") == "holiday-2024_v1.final.jpeg"

    def test_drops_non_ascii_letters(self):
        assert normalize_filename("Café Été.png") == "caf_t.png"

    def test_may_be_empty(self):
        assert normalize_filename("!!!") == ""
        assert normalize_filename("") == ""

    @pytest.mark.parametrize("name", [
        "Résumé (final) [2].PNG",
        "../../etc/passwd",
        "weird space name.gif",
        "EMOJI 😀 shot.JPG",
        "semi;colon&amp'quote\".jpg",
    ])
    def test_output_alphabet(self, name):
        result = normalize_filename(name)
        assert re.fullmatch(r"[a-z0-9_.-]*", result)

    def test_is_deterministic(self):
        assert normalize_filename("Same Name.png") == normalize_filename("Same Name.png")


@pytest.mark.unit
class TestBuildStorageKey:
    """Test suite for storage key construction."""

    def test_key_layout(self):
        key = build_storage_key("my_photo.jpg", now_ms=1700000000123)

        assert re.fullmatch(r"1700000000123-[0-9a-f]{8}-my_photo\.jpg", key)

    def test_same_millisecond_same_name_keys_differ(self):
        keys = {build_storage_key("cat.png", now_ms=1700000000000) for _ in range(50)}

        assert len(keys) == 50

    def test_uses_current_time_by_default(self):
        key = build_storage_key("cat.png")

        timestamp = int(key.split("-", 1)[0])
        assert timestamp > 1_600_000_000_000
