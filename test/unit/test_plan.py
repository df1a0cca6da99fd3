import pytest
from bitonic_sort.constants import GLOBAL_MERGE, LOCAL_SORT
from bitonic_sort.orchestrator import Dispatch, count_global_merges, plan_dispatches
from bitonic_sort.struct_types import make_params
from bitonic_sort.utils import is_power_of_two, log2, next_power_of_two


@pytest.mark.unittest
def test_next_power_of_two():
    assert next_power_of_two(0) == 1
    assert next_power_of_two(1) == 1
    assert next_power_of_two(2) == 2
    assert next_power_of_two(5) == 8
    assert next_power_of_two(64) == 64
    assert next_power_of_two(65) == 128


@pytest.mark.unittest
def test_power_of_two_helpers():
    assert is_power_of_two(1)
    assert is_power_of_two(1024)
    assert not is_power_of_two(0)
    assert not is_power_of_two(12)
    assert log2(1) == 0
    assert log2(64) == 6


@pytest.mark.unittest
def test_plan_small_groups():
    assert plan_dispatches(8, 4) == [
        Dispatch(LOCAL_SORT, 2, 4, None, None),
        Dispatch(GLOBAL_MERGE, 2, 4, 2, 2),
        Dispatch(GLOBAL_MERGE, 2, 4, 2, 1),
        Dispatch(GLOBAL_MERGE, 2, 4, 2, 0),
    ]


@pytest.mark.unittest
def test_plan_fits_in_one_group():
    assert plan_dispatches(2, 64) == [Dispatch(LOCAL_SORT, 1, 2, None, None)]
    assert plan_dispatches(64, 64) == [Dispatch(LOCAL_SORT, 1, 64, None, None)]
    assert plan_dispatches(1, 64) == [Dispatch(LOCAL_SORT, 1, 1, None, None)]


@pytest.mark.unittest
def test_plan_order():
    plan = plan_dispatches(512, 64)
    assert plan[0].kernel == LOCAL_SORT
    pairs = [(d.stage, d.substage) for d in plan[1:]]
    assert pairs == [
        (6, 6), (6, 5), (6, 4), (6, 3), (6, 2), (6, 1), (6, 0),
        (7, 7), (7, 6), (7, 5), (7, 4), (7, 3), (7, 2), (7, 1), (7, 0),
        (8, 8), (8, 7), (8, 6), (8, 5), (8, 4), (8, 3), (8, 2), (8, 1), (8, 0),
    ]
    assert all(d.groups * d.group_size == 512 for d in plan)


@pytest.mark.unittest
@pytest.mark.parametrize("length, group_size, expected", [
    (1, 64, 0),
    (2, 64, 0),
    (64, 64, 0),
    (128, 64, 7),
    (1024, 64, 7 + 8 + 9 + 10),
    (8, 4, 3),
    (8, 1, 1 + 2 + 3),
])
def test_count_global_merges(length, group_size, expected):
    assert count_global_merges(length, group_size) == expected
    plan = plan_dispatches(length, group_size)
    assert sum(1 for d in plan if d.kernel == GLOBAL_MERGE) == expected


@pytest.mark.unittest
def test_plan_rejects_unpadded_length():
    with pytest.raises(ValueError):
        plan_dispatches(12, 4)


@pytest.mark.unittest
def test_make_params():
    params = make_params(256, 64, stage=7, substage=3)
    assert params['stage'] == 7
    assert params['substage'] == 3
    assert params['length'] == 256
    assert params['group_size'] == 64
    assert params.dtype.itemsize == 16
