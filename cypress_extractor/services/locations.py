from bisect import bisect_right
from typing import List

from cypress_extractor.models.schemas import Location


class LineIndex:
    """
    Map character offsets of a source text to 1-based line/column pairs.

    Lines are split on "\\n"; a "\\r" before it counts as a regular column.
    """

    def __init__(self, text: str):
        self.size = len(text)
        self._line_starts: List[int] = [0]
        pos = text.find("\n")
        while pos != -1:
            self._line_starts.append(pos + 1)
            pos = text.find("\n", pos + 1)

    def locate(self, offset: int) -> Location:
        if offset < 0 or offset > self.size:
            raise ValueError(f"offset {offset} outside of text (size {self.size})")

        line = bisect_right(self._line_starts, offset) - 1
        return Location(line=line + 1, column=offset - self._line_starts[line] + 1)
