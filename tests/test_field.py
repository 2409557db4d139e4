import pytest
from hypothesis import given, strategies as st

from zfpy_codec.field import META_BITS, Field, field_1d, field_2d, field_3d
from zfpy_codec.scalar import ZfpType, type_precision

_TYPES = [ZfpType.INT32, ZfpType.INT64, ZfpType.FLOAT, ZfpType.DOUBLE]
_WIDTH = {1: 48, 2: 24, 3: 16}


def test_default_field_is_empty():
    field = Field()
    assert field.dimensionality() == 0
    assert field.zfp_type is ZfpType.NONE
    assert field.size() == 1
    assert field.strides() == ()


def test_constructors_set_dimensionality():
    data = [0.0] * 60
    assert field_1d(data, ZfpType.DOUBLE, 60).dimensionality() == 1
    assert field_2d(data, ZfpType.DOUBLE, 6, 10).dimensionality() == 2
    assert field_3d(data, ZfpType.DOUBLE, 3, 4, 5).dimensionality() == 3


def test_size_matches_data_length():
    data = [0.0] * (3 * 4 * 5)
    field = field_3d(data, ZfpType.FLOAT, 3, 4, 5)
    assert field.size() == len(data)
    assert field.data is data


def test_precision_follows_type():
    assert field_1d(None, ZfpType.FLOAT, 4).precision() == type_precision(ZfpType.FLOAT)
    assert field_1d(None, ZfpType.INT64, 4).precision() == type_precision(ZfpType.INT64)
    assert Field().precision() == 0


def test_contiguous_default_strides():
    field = field_3d(None, ZfpType.DOUBLE, 3, 4, 5)
    assert field.strides() == (1, 3, 3 * 4)
    assert not field.is_strided()


def test_explicit_strides():
    field = field_2d(None, ZfpType.DOUBLE, 3, 4)
    field.set_stride(2, 7)
    assert field.strides() == (2, 7)
    assert field.is_strided()
    field.set_stride(0)
    assert not field.is_strided()


def test_set_size_resets_unused_dimensions():
    field = field_3d(None, ZfpType.DOUBLE, 3, 4, 5)
    field.set_size(9)
    assert (field.nx, field.ny, field.nz) == (9, 0, 0)
    assert field.dimensionality() == 1


def test_set_type_accepts_real_types_and_rejects_none():
    field = Field()
    assert field.set_type(ZfpType.INT32) is ZfpType.INT32
    assert field.zfp_type is ZfpType.INT32
    with pytest.raises(ValueError):
        field.set_type(ZfpType.NONE)
    assert field.zfp_type is ZfpType.INT32


def test_invalid_type_code_rejected():
    with pytest.raises(ValueError):
        Field(zfp_type=9)


def test_metadata_of_smallest_float_field():
    assert field_1d(None, ZfpType.FLOAT, 1).metadata() == 2


def test_metadata_requires_type_and_dimensions():
    with pytest.raises(ValueError):
        field_1d(None, ZfpType.NONE, 4).metadata()
    with pytest.raises(ValueError):
        Field(zfp_type=ZfpType.DOUBLE).metadata()


def test_metadata_rejects_oversized_dimension():
    with pytest.raises(ValueError):
        field_3d(None, ZfpType.DOUBLE, (1 << 16) + 1, 2, 2).metadata()


def test_set_metadata_rejects_four_dimensions_and_overflow():
    field = Field()
    with pytest.raises(ValueError):
        field.set_metadata(0x3 << 2)
    with pytest.raises(ValueError):
        field.set_metadata(1 << META_BITS)


def test_set_metadata_clears_strides():
    source = field_2d(None, ZfpType.INT64, 5, 6)
    target = field_3d(None, ZfpType.FLOAT, 2, 2, 2)
    target.set_stride(1, 2, 3)
    target.set_metadata(source.metadata())
    assert not target.is_strided()
    assert (target.nx, target.ny, target.nz) == (5, 6, 0)
    assert target.zfp_type is ZfpType.INT64


@st.composite
def _fields(draw):
    dims = draw(st.integers(1, 3))
    width = _WIDTH[dims]
    sizes = [draw(st.integers(1, 1 << width)) for _ in range(dims)]
    sizes += [0] * (3 - dims)
    return Field(None, draw(st.sampled_from(_TYPES)), *sizes)


@given(_fields())
def test_metadata_round_trip(field):
    meta = field.metadata()
    assert 0 <= meta < 1 << META_BITS
    copy = Field()
    copy.set_metadata(meta)
    assert copy.zfp_type is field.zfp_type
    assert (copy.nx, copy.ny, copy.nz) == (field.nx, field.ny, field.nz)
    assert copy.metadata() == meta