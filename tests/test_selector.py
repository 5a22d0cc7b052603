from sentrydigest.models.sources import SelectionConfig
from sentrydigest.workflows.selector import select_items

from conftest import make_item


def test_recency_fill_takes_newest_in_order():
    pool = [make_item("X", f"https://x/{d}", d) for d in range(1, 6)]

    selected = select_items(pool, SelectionConfig(max_items=3))

    assert [item.link for item in selected] == ["https://x/5", "https://x/4", "https://x/3"]


def test_quota_items_come_first_then_newest_remaining():
    x_items = [make_item("X", f"https://x/{d}", d) for d in range(10, 20)]
    y_items = [make_item("Y", "https://y/1", 1), make_item("Y", "https://y/2", 2)]

    selected = select_items(x_items + y_items, SelectionConfig(max_items=5, source_min_items={"Y": 2}))

    assert len(selected) == 5
    assert [item.link for item in selected[:2]] == ["https://y/2", "https://y/1"]
    assert [item.link for item in selected[2:]] == ["https://x/19", "https://x/18", "https://x/17"]


def test_output_is_not_resorted_after_quota_phase():
    pool = [make_item("Old", "https://old/1", 1), make_item("New", "https://new/1", 9)]

    selected = select_items(pool, SelectionConfig(max_items=2, source_min_items={"Old": 1}))

    assert [item.source_name for item in selected] == ["Old", "New"]


def test_duplicate_key_appears_once():
    pool = [
        make_item("Krebs", "https://a", 3),
        make_item("Krebs", "https://a", 3),
        make_item("Krebs", "https://b", 2),
    ]

    selected = select_items(pool, SelectionConfig(max_items=10, source_min_items={"Krebs": 2}))

    assert [item.link for item in selected] == ["https://a", "https://b"]


def test_same_link_from_different_sources_is_kept():
    pool = [make_item("A", "https://shared", 1), make_item("B", "https://shared", 2)]

    selected = select_items(pool, SelectionConfig(max_items=10))

    assert len(selected) == 2


def test_empty_pool_gives_empty_list():
    assert select_items([], SelectionConfig(max_items=5, source_min_items={"X": 3})) == []


def test_cap_is_never_exceeded_even_by_quotas():
    pool = [make_item("X", f"https://x/{d}", d) for d in range(1, 6)]
    pool += [make_item("Y", f"https://y/{d}", d) for d in range(1, 6)]

    selected = select_items(pool, SelectionConfig(max_items=3, source_min_items={"X": 4, "Y": 4}))

    assert len(selected) == 3
    assert {item.source_name for item in selected} == {"X"}


def test_first_declared_quota_wins_the_last_slots():
    pool = [make_item("A", f"https://a/{d}", d) for d in range(1, 4)]
    pool += [make_item("B", f"https://b/{d}", d + 10) for d in range(1, 4)]

    selected = select_items(pool, SelectionConfig(max_items=4, source_min_items={"A": 3, "B": 3}))

    assert [item.source_name for item in selected] == ["A", "A", "A", "B"]
    assert selected[3].link == "https://b/3"


def test_quota_picks_newest_of_source():
    pool = [make_item("X", f"https://x/{d}", d) for d in range(1, 8)]
    pool += [make_item("Y", f"https://y/{d}", d) for d in range(1, 8)]

    selected = select_items(pool, SelectionConfig(max_items=6, source_min_items={"Y": 3}))

    y_links = [item.link for item in selected if item.source_name == "Y"]
    assert y_links[:3] == ["https://y/7", "https://y/6", "https://y/5"]


def test_zero_quota_and_unknown_source_are_ignored():
    pool = [make_item("X", f"https://x/{d}", d) for d in range(1, 4)]

    selected = select_items(pool, SelectionConfig(max_items=2, source_min_items={"X": 0, "Missing": 5}))

    assert [item.link for item in selected] == ["https://x/3", "https://x/2"]


def test_zero_cap_selects_nothing():
    pool = [make_item("X", "https://x/1", 1)]

    assert select_items(pool, SelectionConfig(max_items=0, source_min_items={"X": 1})) == []


def test_ties_keep_input_order_and_selection_is_deterministic():
    pool = [make_item("X", f"https://x/{n}", 1) for n in range(6)]
    cfg = SelectionConfig(max_items=4)

    first = select_items(pool, cfg)
    second = select_items(pool, cfg)

    assert first == second
    assert [item.link for item in first] == [f"https://x/{n}" for n in range(4)]


def test_sort_mode_does_not_change_ordering():
    pool = [make_item("X", f"https://x/{d}", d) for d in range(1, 4)]

    plain = select_items(pool, SelectionConfig(max_items=3))
    with_mode = select_items(pool, SelectionConfig(max_items=3, sort_mode="relevance"))

    assert plain == with_mode
