import pytest
from regexec.support.bitvector import BitVector


def test_set_and_str():
    bv = BitVector(10)
    assert str(bv) == "0000000000"
    bv[5] = True
    assert str(bv) == "0000010000"
    assert len(bv) == 1
    assert bv

    bv[5] = False
    assert not bv
    assert len(bv) == 0


def test_source():
    bv = BitVector(10, [2, 4, 7])
    assert list(bv) == [2, 4, 7]
    assert bv[4]
    assert not bv[5]


def test_contains_out_of_range():
    bv = BitVector(10, [0, 9])
    assert 0 in bv
    assert 9 in bv
    assert 10 not in bv
    assert -1 not in bv
    assert "a" not in bv
    assert None not in bv
    assert True not in bv


def test_set_out_of_range():
    bv = BitVector(10)
    with pytest.raises(IndexError):
        bv.set(10)
    with pytest.raises(IndexError):
        bv.clear(-1)


def test_iter_across_bytes():
    bv = BitVector(20, range(20))
    assert len(bv) == 20
    assert list(bv) == list(range(20))

    bv.clear_from(range(0, 20, 2))
    assert list(bv) == list(range(1, 20, 2))


def test_eq():
    bv = BitVector(16, [1, 2])
    bv2 = BitVector(16, [1, 2])
    assert bv2 == bv
    bv2.set(3)
    assert bv2 != bv
    assert BitVector(8) != BitVector(9)


def test_or():
    bv = BitVector(12, [1, 10])
    bv2 = BitVector(12, [2, 10])
    assert list(bv | bv2) == [1, 2, 10]

    with pytest.raises(ValueError):
        bv | BitVector(13)
