"""Tests for offset to line/column mapping."""

import pytest

from cypress_extractor.services.locations import LineIndex


class TestLineIndex:
    def given_text(self, text):
        self.index = LineIndex(text)

    @pytest.mark.parametrize(
        "offset, line, column",
        [
            (0, 1, 1),
            (2, 1, 3),
            (3, 2, 1),
            (5, 2, 3),
        ],
    )
    def test_locate(self, offset, line, column):
        """Lines and columns are 1-based."""
        self.given_text("ab\ncd")
        location = self.index.locate(offset)
        assert (location.line, location.column) == (line, column)

    def test_empty_lines(self):
        """Consecutive newlines each start a line."""
        self.given_text("a\n\n\nb")
        assert self.index.locate(4).line == 4

    def test_out_of_range(self):
        """Offsets outside the text are rejected."""
        self.given_text("abc")
        with pytest.raises(ValueError):
            self.index.locate(4)
        with pytest.raises(ValueError):
            self.index.locate(-1)
