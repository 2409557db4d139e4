import math

import pytest
from hypothesis import given, strategies as st

from zfpy_codec.scalar import ZfpType, traits_for, type_precision


@pytest.mark.parametrize(
    "kind, bits",
    [
        (ZfpType.INT32, 32),
        (ZfpType.INT64, 64),
        (ZfpType.FLOAT, 32),
        (ZfpType.DOUBLE, 64),
        (ZfpType.NONE, 0),
        (99, 0),
    ],
)
def test_type_precision(kind, bits):
    assert type_precision(kind) == bits


def test_float_traits():
    traits = traits_for(ZfpType.FLOAT)
    assert traits.bits == 32
    assert traits.ebits == 8
    assert traits.ebias == 127
    assert traits.nbmask == 0xAAAAAAAA
    assert traits.is_float


def test_double_traits_from_int():
    traits = traits_for(4)
    assert traits.zfp_type is ZfpType.DOUBLE
    assert traits.ebits == 11
    assert traits.ebias == 1023
    assert traits.nbmask == 0xAAAAAAAAAAAAAAAA


def test_integer_traits_have_no_exponent():
    traits = traits_for(ZfpType.INT64)
    assert not traits.is_float
    assert traits.ebias == 0
    assert traits.uint_mask == (1 << 64) - 1


@pytest.mark.parametrize("kind", [ZfpType.NONE, 7])
def test_traits_for_rejects_unknown(kind):
    with pytest.raises(ValueError):
        traits_for(kind)


def test_float_round_loses_precision():
    traits = traits_for(ZfpType.FLOAT)
    third = traits.round(1 / 3)
    assert third != 1 / 3
    assert abs(third - 1 / 3) < 1e-7
    assert traits.round(third) == third
    assert traits.round(1.5) == 1.5


def test_float_round_overflows_to_infinity():
    traits = traits_for(ZfpType.FLOAT)
    assert traits.round(1e300) == math.inf
    assert traits.round(-1e300) == -math.inf


@given(st.floats(allow_nan=False))
def test_double_round_is_identity(value):
    assert traits_for(ZfpType.DOUBLE).round(value) == value


def test_int32_wrap_at_boundary():
    traits = traits_for(ZfpType.INT32)
    assert traits.wrap_int(2**31) == -(2**31)
    assert traits.wrap_int(-1) == -1
    assert traits.round(2**32 + 5) == 5


@given(st.integers(), st.sampled_from([ZfpType.INT32, ZfpType.INT64]))
def test_wrap_int_range_and_congruence(value, kind):
    traits = traits_for(kind)
    wrapped = traits.wrap_int(value)
    assert -(1 << (traits.bits - 1)) <= wrapped < (1 << (traits.bits - 1))
    assert (wrapped - value) % (1 << traits.bits) == 0