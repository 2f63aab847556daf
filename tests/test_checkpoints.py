from checkpoints import CHECKPOINTS, filter_checkpoints


def test_empty_query_lists_everything():
    assert filter_checkpoints("") == CHECKPOINTS
    assert filter_checkpoints("   ") == CHECKPOINTS


def test_matches_name_case_insensitively():
    assert [cp.name for cp in filter_checkpoints("FRAC")] == ["Fractions"]


def test_matches_category():
    assert [cp.name for cp in filter_checkpoints("math")] == ["Fractions", "Decimals"]


def test_no_match():
    assert filter_checkpoints("quantum") == []
