"""Tests for GridConfig editing rules and the session state."""
import dataclasses

import pytest

from models import GridConfig, GridSession, LoadedImage, PAGE_SIZES, CUSTOM, parse_int


class TestPresets:
    """Selecting a preset replaces the page dimensions."""

    @pytest.mark.parametrize("key", list(PAGE_SIZES))
    def test_preset_round_trip(self, key):
        c = GridConfig()
        c.set_option("page_size", key)
        assert c.page_size == key
        assert (c.page_width, c.page_height) == (PAGE_SIZES[key].width, PAGE_SIZES[key].height)

    def test_custom_defaults_to_a4(self):
        assert (PAGE_SIZES[CUSTOM].width, PAGE_SIZES[CUSTOM].height) == (210, 297)

    def test_unknown_preset_raises(self):
        with pytest.raises(ValueError):
            GridConfig().set_option("page_size", "b5")

    def test_editing_width_switches_to_custom(self):
        c = GridConfig()
        c.set_option("page_size", "letter")
        assert c.set_option("page_width", "300") is True
        assert c.page_size == CUSTOM
        assert c.page_width == 300
        assert c.page_height == 279

    def test_preset_discards_manual_width(self):
        c = GridConfig()
        c.set_option("page_width", 300)
        c.set_option("page_size", "letter")
        assert (c.page_width, c.page_height) == (216, 279)
        assert c.page_size == "letter"


class TestNumericOptions:
    """Bad numbers are ignored and the previous value kept."""

    @pytest.mark.parametrize("value", ["", "abc", None, -3, "-1", float("nan")])
    def test_invalid_margin_ignored(self, value):
        c = GridConfig()
        assert c.set_option("margin", value) is False
        assert c.margin == 10

    @pytest.mark.parametrize("key", ["page_width", "page_height"])
    def test_non_positive_page_dimension_ignored(self, key):
        c = GridConfig()
        assert c.set_option(key, 0) is False
        assert c.page_size == "a4"

    def test_strings_parse_leading_integer(self):
        c = GridConfig()
        c.set_option("columns", "6")
        c.set_option("rows", " 3 rows")
        c.set_option("margin", "12.7")
        assert (c.columns, c.rows, c.margin) == (6, 3, 12)

    def test_zero_columns_ignored(self):
        c = GridConfig()
        assert c.set_option("columns", 0) is False
        assert c.columns == 4

    def test_margin_zero_allowed(self):
        c = GridConfig()
        assert c.set_option("margin", 0) is True
        assert c.margin == 0

    @pytest.mark.parametrize("value,expected", [(5, 10), (500, 100), (42, 42)])
    def test_image_scale_clamped(self, value, expected):
        c = GridConfig()
        c.set_option("image_scale", value)
        assert c.image_scale == expected

    def test_unchanged_value_reports_false(self):
        c = GridConfig()
        assert c.set_option("rows", 5) is False


    @pytest.mark.parametrize("key,value", [
        ("page_width", 5001), ("page_height", 9999), ("columns", 101),
        ("rows", 1000), ("margin", 501),
    ])
    def test_out_of_range_ignored(self, key, value):
        c = GridConfig()
        before = dataclasses.replace(c)
        assert c.set_option(key, value) is False
        assert c == before

    def test_small_custom_page_accepted(self):
        c = GridConfig()
        assert c.set_option("page_width", 30) is True
        assert c.page_width == 30

    def test_unknown_option_raises(self):
        with pytest.raises(KeyError):
            GridConfig().set_option("gutter", 3)

    def test_parse_int_rejects_bool(self):
        assert parse_int(True) is None


class TestOrientation:

    def test_portrait_when_taller(self):
        assert GridConfig().is_portrait

    def test_square_is_landscape(self):
        c = GridConfig(page_size=CUSTOM, page_width=200, page_height=200)
        assert not c.is_portrait


class TestSession:
    """A session holds zero or one image."""

    def test_empty_session(self):
        s = GridSession()
        assert not s.has_image
        assert s.config == GridConfig()

    def test_new_image_replaces_old(self, loaded_image):
        s = GridSession()
        s.set_image(loaded_image)
        other = LoadedImage(name="b.png", data=b"", pixel_width=10, pixel_height=20)
        s.set_image(other)
        assert s.image is other

    def test_remove_is_idempotent(self, loaded_image):
        s = GridSession()
        s.set_image(loaded_image)
        s.remove_image()
        once = (s.image, s.has_image)
        s.remove_image()
        assert (s.image, s.has_image) == once == (None, False)

    def test_aspect(self, loaded_image):
        assert loaded_image.aspect == pytest.approx(800 / 600)
