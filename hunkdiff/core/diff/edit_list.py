"""
Edit list computation.

Computes the minimal list of line-range edits between two raw texts
using the Myers O(N*D) difference algorithm:
- Lines are interned to integer keys before comparison
- Common prefix and suffix are trimmed before the search
- Results are deterministic for identical inputs
"""

from __future__ import annotations

import logging
from typing import Sequence

from hunkdiff.core.models import Edit, RawText


class EditListComputer:
    """
    Computes ordered, non-overlapping edits between two raw texts.

    Lines are compared as rendered, including their line ending, so a
    change in only the line ending (CRLF vs LF, or a missing final
    newline) is reported as an edit.
    """

    def compute(self, old_text: RawText, new_text: RawText) -> list[Edit]:
        """
        Compute the edit list between two raw texts.

        Args:
            old_text: Old side content
            new_text: New side content

        Returns:
            Edits ordered by increasing position on both sides, empty when
            the texts are equal
        """
        old_keys, new_keys = self._intern_lines(old_text, new_text)
        return self.compute_keys(old_keys, new_keys)

    def compute_keys(self, a: Sequence[int], b: Sequence[int]) -> list[Edit]:
        """Compute the edit list between two sequences of line keys."""
        n = len(a)
        m = len(b)

        prefix = 0
        while prefix < n and prefix < m and a[prefix] == b[prefix]:
            prefix += 1

        suffix = 0
        while (suffix < n - prefix and suffix < m - prefix
               and a[n - 1 - suffix] == b[m - 1 - suffix]):
            suffix += 1

        a_mid = a[prefix:n - suffix]
        b_mid = b[prefix:m - suffix]

        if not a_mid and not b_mid:
            return []
        if not a_mid or not b_mid:
            return [Edit(prefix, prefix + len(a_mid), prefix, prefix + len(b_mid))]

        edits = self._myers(a_mid, b_mid)
        if prefix:
            edits = [
                Edit(e.begin_a + prefix, e.end_a + prefix, e.begin_b + prefix, e.end_b + prefix)
                for e in edits
            ]

        logging.debug(f"EditListComputer - {len(edits)} edits for {n}x{m} lines")
        return edits

    def _intern_lines(
        self,
        old_text: RawText,
        new_text: RawText
    ) -> tuple[list[int], list[int]]:
        """Map every line to an integer key shared between both sides."""
        table: dict[str, int] = {}

        def keys_for(text: RawText) -> list[int]:
            return [
                table.setdefault(text.rendered_line(i), len(table))
                for i in range(text.size())
            ]

        return keys_for(old_text), keys_for(new_text)

    def _myers(self, a: Sequence[int], b: Sequence[int]) -> list[Edit]:
        """Shortest edit script search followed by a backtrack into edits."""
        n = len(a)
        m = len(b)
        max_d = n + m
        offset = max_d + 1

        # v[offset + k] = furthest x reached on diagonal k
        v = [0] * (2 * max_d + 3)
        # trace[d] = v[-d..d] after step d
        trace: list[list[int]] = []

        final_d = max_d
        for d in range(max_d + 1):
            done = False
            for k in range(-d, d + 1, 2):
                if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
                    x = v[offset + k + 1]
                else:
                    x = v[offset + k - 1] + 1
                y = x - k

                while x < n and y < m and a[x] == b[y]:
                    x += 1
                    y += 1

                v[offset + k] = x

                if x >= n and y >= m:
                    done = True
                    break

            if done:
                final_d = d
                break
            trace.append(v[offset - d:offset + d + 1])

        return self._backtrack(trace, n, m, final_d)

    def _backtrack(
        self,
        trace: list[list[int]],
        n: int,
        m: int,
        final_d: int
    ) -> list[Edit]:
        """Walk the trace back from (n, m) and coalesce steps into edits."""
        steps: list[tuple[int, int, int, int]] = []
        x = n
        y = m

        for d in range(final_d, 0, -1):
            prev = trace[d - 1]
            k = x - y

            if k == -d or (k != d and prev[k - 1 + d - 1] < prev[k + 1 + d - 1]):
                prev_k = k + 1
            else:
                prev_k = k - 1

            prev_x = prev[prev_k + d - 1]
            prev_y = prev_x - prev_k

            while x > prev_x and y > prev_y:
                x -= 1
                y -= 1

            if prev_k == k + 1:
                # Insertion of b[prev_y]
                steps.append((prev_x, prev_y, prev_x, prev_y + 1))
            else:
                # Deletion of a[prev_x]
                steps.append((prev_x, prev_y, prev_x + 1, prev_y))

            x = prev_x
            y = prev_y

        steps.reverse()

        bounds: list[list[int]] = []
        for x0, y0, x1, y1 in steps:
            if bounds and bounds[-1][1] == x0 and bounds[-1][3] == y0:
                bounds[-1][1] = x1
                bounds[-1][3] = y1
            else:
                bounds.append([x0, x1, y0, y1])

        return [Edit(begin_a, end_a, begin_b, end_b) for begin_a, end_a, begin_b, end_b in bounds]
