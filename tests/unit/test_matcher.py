"""
Unit tests for LCS alignment and hunk grouping.
"""

from banktx_sync.sequence.matcher import DELETE, INSERT, KEEP, diff, edit_script, lcs_table


def _signs(hunks):
    return [[(item.sign, item.index) for item in hunk] for hunk in hunks]


class TestLcsTable:
    def test_lengths(self):
        table = lcs_table("ABCBDAB", "BDCABA")

        assert table[0][0] == 4

    def test_empty(self):
        assert lcs_table([], []) == [[0]]
        assert lcs_table("AB", [])[0][0] == 0


class TestEditScript:
    def test_identical(self):
        steps = edit_script("ABC", "ABC")

        assert steps == [(KEEP, 0, 0), (KEEP, 1, 1), (KEEP, 2, 2)]

    def test_every_index_appears_once(self):
        old, new = "XAYBZC", "ABQC"
        steps = edit_script(old, new)

        assert sorted(o for _, o, _ in steps if o is not None) == list(range(len(old)))
        assert sorted(n for _, _, n in steps if n is not None) == list(range(len(new)))

    def test_key_function(self):
        old = [{"d": "a"}, {"d": "b"}]
        new = [{"d": "b"}]

        steps = edit_script(old, new, key=lambda r: r["d"])

        assert steps == [(DELETE, 0, None), (KEEP, 1, 0)]


class TestDiff:
    def test_no_changes(self):
        assert diff("ABC", "ABC") == []

    def test_insert_at_front_and_delete_in_middle(self):
        hunks = diff(["Tx1", "Tx2", "Tx3"], ["Tx4", "Tx1", "Tx3"])

        assert _signs(hunks) == [[(INSERT, 0)], [(DELETE, 1)]]
        assert hunks[0].items[0].item == "Tx4"
        assert hunks[1].items[0].item == "Tx2"

    def test_replacement_groups_deletions_before_insertions(self):
        hunks = diff("ABCD", "AXYD")

        assert _signs(hunks) == [[(DELETE, 1), (DELETE, 2), (INSERT, 1), (INSERT, 2)]]
        assert [i.index for i in hunks[0].deletions] == [1, 2]
        assert [i.index for i in hunks[0].insertions] == [1, 2]
        assert len(hunks[0]) == 4

    def test_swap_keeps_earlier_old_item(self):
        hunks = diff("AB", "BA")

        # B moves in front of A; the old B is deleted
        assert _signs(hunks) == [[(INSERT, 0)], [(DELETE, 1)]]

    def test_empty_old(self):
        assert _signs(diff([], ["N"])) == [[(INSERT, 0)]]

    def test_empty_new(self):
        assert _signs(diff(["A", "B"], [])) == [[(DELETE, 0), (DELETE, 1)]]

    def test_duplicates_match_in_order(self):
        hunks = diff(["A", "A", "B"], ["A", "B", "A"])

        assert sum(len(h.deletions) for h in hunks) == 1
        assert sum(len(h.insertions) for h in hunks) == 1

    def test_deterministic(self):
        old, new = list("ABCABBA"), list("CBABAC")

        assert _signs(diff(old, new)) == _signs(diff(old, new))
