import pytest

from split_ledger.errors import InternalError
from split_ledger.services.allocation import allocate_area, area_from_length


def test_allocates_in_proportion_to_width():
    allocations = allocate_area(40, [600, 400], 1000)
    assert allocations == pytest.approx([24, 16])


def test_last_row_takes_the_remainder():
    allocations = allocate_area(100, [333, 333, 334], 1000)
    assert allocations[0] == pytest.approx(33.3)
    assert allocations[1] == pytest.approx(33.3)
    assert abs(sum(allocations) - 100) <= 1e-8


def test_duplicate_widths_share_equally():
    allocations = allocate_area(30, [500, 500], 1000)
    assert allocations == pytest.approx([15, 15])


def test_every_row_is_non_negative():
    allocations = allocate_area(0.7, [200, 300, 200, 100, 200], 1000)
    assert all(a >= 0 for a in allocations)
    assert abs(sum(allocations) - 0.7) <= 1e-8


def test_near_zero_allocation_clamps_to_zero():
    allocations = allocate_area(1e-12, [600, 400], 1000)
    assert allocations == [0.0, 0.0]


def test_empty_plan_is_internal_error():
    with pytest.raises(InternalError):
        allocate_area(10, [], 1000)


def test_non_positive_original_width_is_internal_error():
    with pytest.raises(InternalError):
        allocate_area(10, [0], 0)


def test_area_from_length_uses_metres_of_millimetre_width():
    assert area_from_length(600, 2.5) == pytest.approx(1.5)
    assert area_from_length(1000, 40) == pytest.approx(40)
