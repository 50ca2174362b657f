import random

from warehouse_inventory.models import PALLET_STATUSES
from warehouse_inventory.queries import SlotFilter, compute_stats, filter_slots, group_by_aisle

from conftest import make_slot


def sample_slots():
    return [
        make_slot("A011", status="normal", product_code="PROD-ABC"),
        make_slot("A012"),
        make_slot("B011", status="expired", product_code="PROD-XYZ"),
        make_slot("B021", status="expiring", product_code="abc-9"),
        make_slot("C011"),
    ]


def test_no_criteria_returns_everything():
    slots = sample_slots()
    assert filter_slots(slots) == slots
    assert filter_slots(slots, SlotFilter()) == slots


def test_search_location_and_product_code_case_insensitive():
    slots = sample_slots()
    by_location = filter_slots(slots, SlotFilter(search_term="b01"))
    assert [s.id for s in by_location] == ["B011"]
    by_code = filter_slots(slots, SlotFilter(search_term="ABC"))
    assert [s.id for s in by_code] == ["A011", "B021"]


def test_status_filter():
    slots = sample_slots()
    assert [s.id for s in filter_slots(slots, SlotFilter(status="empty"))] == ["A012", "C011"]
    assert [s.id for s in filter_slots(slots, SlotFilter(status="expired"))] == ["B011"]
    assert filter_slots(slots, SlotFilter(status="reserved")) == []


def test_aisle_filter_combined():
    slots = sample_slots()
    result = filter_slots(slots, SlotFilter(status="empty", aisle="A"))
    assert [s.id for s in result] == ["A012"]


def test_filter_is_exact_subsequence(generated_slots):
    """Every matching slot is returned, in input order, and nothing else."""
    rng = random.Random(0)
    terms = ["", "a0", "prod-", "1", "zz"]
    statuses = ["all", "empty"] + list(PALLET_STATUSES)
    aisles = ["all", "A", "B", "C", "D"]
    for _ in range(50):
        criteria = SlotFilter(rng.choice(terms), rng.choice(statuses), rng.choice(aisles))
        result = filter_slots(generated_slots, criteria)
        assert result == [s for s in generated_slots if criteria.matches(s)]
        for s in result:
            assert criteria.matches(s)


def test_group_by_aisle_sorts_by_bay_then_level():
    slots = [make_slot("B022"), make_slot("A021"), make_slot("B011"), make_slot("A013"), make_slot("B021")]
    grouped = group_by_aisle(slots)
    assert list(grouped) == ["B", "A"]
    assert [s.id for s in grouped["B"]] == ["B011", "B021", "B022"]
    assert [s.id for s in grouped["A"]] == ["A013", "A021"]


def test_group_by_aisle_level_is_numeric():
    slots = [make_slot("A0110"), make_slot("A012")]
    grouped = group_by_aisle(slots)
    assert [s.level for s in grouped["A"]] == [2, 10]


def test_stats():
    stats = compute_stats(sample_slots())
    assert stats.total == 5
    assert stats.occupied == 3
    assert stats.empty == 2
    assert stats.expiring == 1
    assert stats.expired == 1
    assert stats.by_status["normal"] == 1
    assert stats.by_status["reserved"] == 0
    assert set(stats.by_status) == set(PALLET_STATUSES)
    assert stats.occupancy_rate == 0.6


def test_stats_consistency(generated_slots):
    stats = compute_stats(generated_slots)
    assert stats.occupied + stats.empty == stats.total == len(generated_slots)
    assert sum(stats.by_status.values()) == stats.occupied


def test_stats_empty():
    stats = compute_stats([])
    assert stats.total == stats.occupied == stats.empty == 0
    assert stats.occupancy_rate == 0.0
