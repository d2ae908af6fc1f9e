"""Tests for the file cache example."""


class TestFileCacheApp:
    """Verify cached templates produce identical output."""

    def test_output_is_valid_html(self, example_app) -> None:
        assert "<html>" in example_app.output
        assert "<title>Cached Page</title>" in example_app.output

    def test_output_contains_all_items(self, example_app) -> None:
        for entry in ("alpha", "beta", "gamma"):
            assert f"  <li>{entry}</li>\n" in example_app.output

    def test_cache_has_files_after_first_load(self, example_app) -> None:
        stats = example_app.stats_after_first
        assert stats["file_count"] == 1
        assert stats["total_bytes"] > 0

    def test_second_load_produces_same_output(self, example_app) -> None:
        assert example_app.output_first == example_app.output_second

    def test_cache_stats_stable_after_second_load(self, example_app) -> None:
        """Second load should use the existing entry, not add new files."""
        assert example_app.stats_after_second == example_app.stats_after_first

    def test_cache_file_is_named_after_template_class(self, example_app) -> None:
        source = example_app.templates["page"]
        class_name = example_app.engine1.get_template_class_name(source)
        assert example_app.cache.filename(class_name).is_file()
