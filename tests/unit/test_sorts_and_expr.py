import pytest

from fuzzsmt.core.errors import GenerationError
from fuzzsmt.core.expr import BVLiteral, Numeral, app, apply, sort_of
from fuzzsmt.core.ops import Op
from fuzzsmt.core.sorts import BOOL, INT, REAL, ArraySort, BitVecSort, UninterpretedSort, width_of
from fuzzsmt.core.terms import Signature, Term, UninterpretedFunction, UninterpretedPredicate


def test_sorts_compare_by_value():
    assert BitVecSort(8) == BitVecSort(8)
    assert hash(BitVecSort(8)) == hash(BitVecSort(8))
    assert BitVecSort(8) != BitVecSort(4)
    assert ArraySort(INT, REAL) == ArraySort(INT, REAL)
    assert UninterpretedSort("S0") != UninterpretedSort("S1")


@pytest.mark.parametrize("width", [0, -3, True, 2.5])
def test_bad_bitvector_width_rejected(width):
    with pytest.raises(ValueError):
        BitVecSort(width)


def test_width_of_non_bitvector():
    with pytest.raises(TypeError):
        width_of(INT)


def test_literal_must_fit_width():
    assert BVLiteral.ones(4).value == 15
    with pytest.raises(ValueError):
        BVLiteral(16, 4)


def test_numeral_is_non_negative():
    with pytest.raises(ValueError):
        Numeral(-1, INT)


def test_indexed_sorts():
    x = Term(0, BitVecSort(8), "x")
    assert sort_of(app(Op.EXTRACT, x, indices=(5, 2))) == BitVecSort(4)
    assert sort_of(app(Op.ZERO_EXTEND, x, indices=(3,))) == BitVecSort(11)
    assert sort_of(app(Op.REPEAT, x, indices=(2,))) == BitVecSort(16)
    assert sort_of(app(Op.ROTATE_LEFT, x, indices=(9,))) == BitVecSort(8)
    with pytest.raises(GenerationError):
        sort_of(app(Op.EXTRACT, x, indices=(8, 0)))


def test_bitvector_binary_needs_equal_widths():
    x = Term(0, BitVecSort(8), "x")
    y = Term(1, BitVecSort(4), "y")
    assert sort_of(app(Op.CONCAT, x, y)) == BitVecSort(12)
    assert sort_of(app(Op.BVULT, x, x)) == BOOL
    assert sort_of(app(Op.BVCOMP, x, x)) == BitVecSort(1)
    with pytest.raises(GenerationError):
        sort_of(app(Op.BVADD, x, y))


def test_array_select_and_store():
    a = Term(0, ArraySort(INT, REAL), "a")
    i = Term(1, INT, "i")
    r = Term(2, REAL, "r")
    assert sort_of(app(Op.SELECT, a, i)) == REAL
    assert sort_of(app(Op.STORE, a, i, r)) == ArraySort(INT, REAL)
    with pytest.raises(GenerationError):
        sort_of(app(Op.STORE, a, i, i))


def test_division_is_real_only():
    i = Term(0, INT, "i")
    assert sort_of(app(Op.DIV, Numeral(1, REAL), Numeral(2, REAL))) == REAL
    with pytest.raises(GenerationError):
        sort_of(app(Op.DIV, i, i))


def test_nary_kinds_need_two_operands():
    p = Term(0, BOOL, "p")
    with pytest.raises(GenerationError):
        sort_of(app(Op.AND, p))
    assert sort_of(app(Op.AND, p, p, p)) == BOOL


def test_application_checks_signature():
    f = UninterpretedFunction(7, "f0", Signature((INT, REAL), INT))
    i = Term(0, INT, "i")
    r = Term(1, REAL, "r")
    assert sort_of(apply(f, i, r)) == INT
    with pytest.raises(GenerationError):
        sort_of(apply(f, r, i))


def test_predicate_must_return_bool():
    with pytest.raises(GenerationError):
        UninterpretedPredicate(0, "p0", Signature((INT,), INT))


def test_ite_condition_must_be_bool():
    i = Term(0, INT, "i")
    p = Term(1, BOOL, "p")
    assert sort_of(app(Op.ITE, p, i, i)) == INT
    with pytest.raises(GenerationError):
        sort_of(app(Op.ITE, i, i, i))
