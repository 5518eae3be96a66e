"""Tests for loading comparison profiles from YAML."""

import pytest

from xlcompare.core.options import ComparisonOptions
from xlcompare.core.options_loader import load_options


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run each test in an empty directory with no profile variable set."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("XLCOMPARE_OPTIONS", raising=False)
    return tmp_path


class TestLoadOptions:
    """Tests for profile lookup and validation."""

    def test_defaults_without_profile(self):
        assert load_options() == ComparisonOptions()

    def test_explicit_path(self, tmp_path):
        profile = tmp_path / "profile.yaml"
        profile.write_text("comparison:\n  compare_cell_format: true\n  compare_values: false\n")

        options = load_options(profile)

        assert options.compare_cell_format
        assert not options.compare_values
        assert options.compare_formulas

    def test_environment_variable(self, tmp_path, monkeypatch):
        profile = tmp_path / "env.yaml"
        profile.write_text("comparison:\n  compare_sheet_order: false\n")
        monkeypatch.setenv("XLCOMPARE_OPTIONS", str(profile))

        assert not load_options().compare_sheet_order

    def test_default_location(self, tmp_path):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "xlcompare.yaml").write_text("comparison:\n  compare_hidden_rows_cols: true\n")

        assert load_options().compare_hidden_rows_cols

    def test_empty_section_gives_defaults(self, tmp_path):
        profile = tmp_path / "profile.yaml"
        profile.write_text("comparison:\n")
        assert load_options(profile) == ComparisonOptions()

    def test_missing_explicit_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_options(tmp_path / "nope.yaml")

    def test_missing_section(self, tmp_path):
        profile = tmp_path / "profile.yaml"
        profile.write_text("other: 1\n")
        with pytest.raises(ValueError, match="comparison"):
            load_options(profile)

    def test_unknown_option(self, tmp_path):
        profile = tmp_path / "profile.yaml"
        profile.write_text("comparison:\n  compare_colours: true\n")
        with pytest.raises(ValueError, match="compare_colours"):
            load_options(profile)

    def test_invalid_yaml(self, tmp_path):
        profile = tmp_path / "profile.yaml"
        profile.write_text("comparison: [unclosed\n")
        with pytest.raises(ValueError):
            load_options(profile)
