"""Tests for the loop_context example."""


class TestLoopContextApp:
    """Verify $loop->first, $loop->last, $loop->iteration and $loop->count."""

    def test_first_row_has_first_class(self, example_app) -> None:
        assert 'class="row-1 first"' in example_app.output

    def test_last_row_has_last_class(self, example_app) -> None:
        assert 'class="row-4 last"' in example_app.output

    def test_middle_rows_plain(self, example_app) -> None:
        assert 'class="row-2"' in example_app.output
        assert 'class="row-3"' in example_app.output

    def test_loop_count_rendered(self, example_app) -> None:
        assert "<td>1/4</td>" in example_app.output
        assert "<td>4/4</td>" in example_app.output

    def test_cycle(self, example_app) -> None:
        assert example_app.output.count("<td>odd</td>") == 2
        assert example_app.output.count("<td>even</td>") == 2

    def test_all_items_present(self, example_app) -> None:
        for item in ["Alpha", "Beta", "Gamma", "Delta"]:
            assert f"<td>{item}</td>" in example_app.output

    def test_empty_branch(self, example_app) -> None:
        assert "No items" in example_app.empty_output
        assert "No items" not in example_app.output
