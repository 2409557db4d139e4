import pytest
from hypothesis import given
from hypothesis import strategies as st

from zfpy_codec.transform import (
    fwd_lift,
    fwd_xform,
    int2uint,
    inv_lift,
    inv_xform,
    permutation,
    precision,
    uint2int,
)


def test_permutation_1d_is_identity():
    assert permutation(1) == (0, 1, 2, 3)


def test_permutation_2d_begins_with_lowest_degrees():
    assert permutation(2)[:4] == (0, 1, 4, 5)


@pytest.mark.parametrize("dims", [1, 2, 3])
def test_permutation_is_bijection(dims):
    perm = permutation(dims)
    assert sorted(perm) == list(range(4**dims))


@pytest.mark.parametrize("dims", [1, 2, 3])
def test_permutation_orders_by_total_degree(dims):
    def degree(index):
        return sum((index >> (2 * axis)) & 3 for axis in range(dims))

    degrees = [degree(i) for i in permutation(dims)]
    assert degrees == sorted(degrees)


@pytest.mark.parametrize("dims", [0, 4])
def test_permutation_rejects_bad_dims(dims):
    with pytest.raises(ValueError):
        permutation(dims)


def test_precision_is_clamped_by_maxprec():
    assert precision(100, 20, 0, 1) == 20


def test_precision_never_negative():
    assert precision(-500, 64, 0, 3) == 0


@given(st.integers(-100, 100), st.integers(-100, 100))
def test_precision_grows_by_two_per_dimension(maxexp, minexp):
    lower = precision(maxexp, 1000, minexp, 1)
    if lower > 0:
        assert precision(maxexp, 1000, minexp, 2) == lower + 2
        assert precision(maxexp, 1000, minexp, 3) == lower + 4


@given(st.integers(-(2**28), 2**28))
def test_fwd_lift_of_constant_keeps_only_mean(c):
    block = [c] * 4
    fwd_lift(block, 0, 1, 32)
    assert block == [c, 0, 0, 0]
    inv_lift(block, 0, 1, 32)
    assert block == [c] * 4


def test_lift_touches_only_strided_entries():
    block = [7, -1, 7, -1, 7, -1, 7, -1]
    fwd_lift(block, 0, 2, 64)
    assert block[1::2] == [-1, -1, -1, -1]
    assert block[0::2] == [7, 0, 0, 0]


@pytest.mark.parametrize("dims", [1, 2, 3])
@given(data=st.data())
def test_xform_round_trip_is_exact_without_low_bits(dims, data):
    scale = 16**dims
    values = data.draw(
        st.lists(st.integers(-(2**12), 2**12), min_size=4**dims, max_size=4**dims)
    )
    original = [v * scale for v in values]
    block = list(original)
    fwd_xform(block, dims, 64)
    inv_xform(block, dims, 64)
    assert block == original


@given(st.lists(st.integers(-(2**31), 2**31 - 1), min_size=4, max_size=4))
def test_lift_results_stay_in_width(values):
    block = list(values)
    fwd_lift(block, 0, 1, 32)
    assert all(-(2**31) <= v < 2**31 for v in block)
    inv_lift(block, 0, 1, 32)
    assert all(-(2**31) <= v < 2**31 for v in block)


def test_xform_rejects_wrong_length():
    with pytest.raises(ValueError):
        fwd_xform([0] * 15, 2, 32)


def test_xform_rejects_bad_dims():
    with pytest.raises(ValueError):
        inv_xform([0] * 256, 4, 32)


@pytest.mark.parametrize("bits", [32, 64])
@given(data=st.data())
def test_negabinary_round_trip(bits, data):
    x = data.draw(st.integers(-(2 ** (bits - 1)), 2 ** (bits - 1) - 1))
    u = int2uint(x, bits)
    assert 0 <= u < 2**bits
    assert uint2int(u, bits) == x


def test_negabinary_maps_zero_to_zero():
    assert int2uint(0, 32) == 0
    assert uint2int(0, 64) == 0


@given(st.integers(-(2**15), 2**15))
def test_negabinary_small_magnitudes_stay_small(x):
    assert int2uint(x, 32) < 2**18


def test_negabinary_rejects_unsupported_width():
    with pytest.raises(ValueError):
        int2uint(1, 16)