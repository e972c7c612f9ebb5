import logging
import random
from fractions import Fraction

import pytest

from fieldelim.eliminator import (
    EliminationStateError,
    FieldEliminator,
    Mode,
    apply_log,
    eliminate,
)
from fieldelim.field import QQ, PrimeField
from fieldelim.matrix import FieldMatrix
from fieldelim.steps import AddCol, AddRow, ScaleRow, SwapRows
from tests.helpers import (
    is_canonical_diagonal,
    make_low_rank_matrix,
    make_random_matrix,
    minor_rank,
    verify_reduced_row_echelon,
)

ALL_MODES = [Mode.BOTH, Mode.ROWS_ONLY, Mode.COLS_ONLY]

SHAPES = [(1, 1), (2, 2), (3, 3), (2, 4), (4, 2), (4, 4), (3, 5)]


# --- Concrete scenarios ---


def test_scenario_full_rank_2x2():
    A = FieldMatrix.from_rows(QQ, [[2, 4], [1, 3]])
    e = FieldEliminator(A, Mode.BOTH).run()

    assert e.diagonal() == [1, 1]
    assert e.rank() == 2
    assert e.steps() == (
        ScaleRow(0, Fraction(1, 2)),
        AddRow(0, 1, -1),
        AddCol(0, 1, -2),
    )


def test_scenario_rank_deficient_3x3():
    A = FieldMatrix.from_rows(QQ, [[1, 2, 3], [2, 4, 6], [1, 1, 1]])
    e = FieldEliminator(A, Mode.BOTH).run()

    assert e.diagonal() == [1, 1, 0]
    assert e.rank() == 2


def test_scenario_pivot_below_diagonal_triggers_row_swap():
    A = FieldMatrix.from_rows(QQ, [[0, 1], [1, 0]])
    e = FieldEliminator(A, Mode.BOTH).run()

    assert e.steps()[0] == SwapRows(0, 1)
    assert e.steps() == (SwapRows(0, 1),)
    assert e.diagonal() == [1, 1]


@pytest.mark.parametrize("mode", ALL_MODES, ids=lambda m: m.name)
def test_scenario_zero_matrix(mode):
    A = FieldMatrix.zeros(QQ, 3, 3)
    e = FieldEliminator(A, mode).run()

    assert e.rank() == 0
    assert e.steps() == ()
    assert e.diagonal() == [0, 0, 0]


# --- Structural properties ---


@pytest.mark.parametrize("shape", SHAPES, ids=lambda s: f"{s[0]}x{s[1]}")
@pytest.mark.parametrize("seed_value", [1, 7, 2025])
def test_rank_matches_minor_rank(shape, seed_value):
    random.seed(seed_value)
    nrows, ncols = shape
    A = make_low_rank_matrix(QQ, nrows, ncols, rank=max(1, min(shape) - 1))

    assert eliminate(A).rank == minor_rank(A)


@pytest.mark.parametrize("p", [2, 3, 7])
def test_rank_over_prime_field_matches_minor_rank(p):
    random.seed(p)
    F = PrimeField(p)
    for _ in range(5):
        A = make_random_matrix(F, 3, 4)
        assert eliminate(A).rank == minor_rank(A)


def test_rank_depends_on_field():
    rows = [[3, 5], [6, 3]]
    assert eliminate(FieldMatrix.from_rows(QQ, rows)).rank == 2
    assert eliminate(FieldMatrix.from_rows(PrimeField(7), rows)).rank == 1


@pytest.mark.parametrize("shape", SHAPES, ids=lambda s: f"{s[0]}x{s[1]}")
def test_both_mode_gives_canonical_diagonal(shape, seeded_rng):
    A = make_low_rank_matrix(QQ, *shape, rank=min(shape) // 2 + 1)
    res = eliminate(A, Mode.BOTH)

    assert is_canonical_diagonal(res.result, res.rank)
    assert len(res.diagonal) == min(shape)


@pytest.mark.parametrize("mode", ALL_MODES, ids=lambda m: m.name)
@pytest.mark.parametrize("shape", SHAPES, ids=lambda s: f"{s[0]}x{s[1]}")
@pytest.mark.parametrize("field", [QQ, PrimeField(5)], ids=["QQ", "F5"])
def test_transformation_is_faithful(mode, shape, field, seeded_rng):
    A = make_random_matrix(field, *shape)
    e = FieldEliminator(A, mode).run()

    P = e.left_transform()
    Q = e.right_transform()

    assert P @ A @ Q == e.result()
    assert apply_log(e.steps(), A) == e.result()


@pytest.mark.parametrize("shape", SHAPES, ids=lambda s: f"{s[0]}x{s[1]}")
def test_inverse_transforms(shape, seeded_rng):
    A = make_random_matrix(QQ, *shape)
    e = FieldEliminator(A).run()

    assert e.left_transform() @ e.left_inverse() == FieldMatrix.identity(QQ, A.nrows)
    assert e.right_inverse() @ e.right_transform() == FieldMatrix.identity(QQ, A.ncols)


def test_rows_only_gives_reduced_row_echelon(seeded_rng):
    for _ in range(10):
        A = make_low_rank_matrix(QQ, 4, 5, rank=2)
        e = FieldEliminator(A, Mode.ROWS_ONLY).run()

        assert verify_reduced_row_echelon(e.result())
        assert all(s.is_row_step for s in e.steps())
        assert e.rank() == minor_rank(A)


def test_cols_only_gives_reduced_column_echelon(seeded_rng):
    for _ in range(10):
        A = make_low_rank_matrix(QQ, 5, 4, rank=2)
        e = FieldEliminator(A, Mode.COLS_ONLY).run()

        assert verify_reduced_row_echelon(e.result().transpose())
        assert all(s.is_col_step for s in e.steps())
        assert e.rank() == minor_rank(A)


def test_pivots_are_recorded_after_relocation():
    A = FieldMatrix.from_rows(QQ, [[0, 1, 2], [0, 2, 4], [1, 0, 0]])
    e = FieldEliminator(A, Mode.ROWS_ONLY).run()

    assert e.pivots() == ((0, 0), (1, 1))
    assert e.steps()[0] == SwapRows(0, 2)


# --- Already reduced and degenerate inputs ---


@pytest.mark.parametrize(
    "rows",
    [
        [[1, 0, 0], [0, 1, 0], [0, 0, 0]],
        [[1, 0, 0], [0, 1, 0]],
        [[1, 0], [0, 0], [0, 0]],
    ],
    ids=["3x3-rank2", "2x3-rank2", "3x2-rank1"],
)
def test_canonical_input_records_no_steps(rows):
    A = FieldMatrix.from_rows(QQ, rows)
    e = FieldEliminator(A).run()

    assert e.steps() == ()
    assert e.diagonal() == A.diagonal_entries()


@pytest.mark.parametrize("n", [1, 2, 5])
def test_identity_records_no_steps(n):
    e = FieldEliminator(FieldMatrix.identity(QQ, n)).run()

    assert e.rank() == n
    assert e.steps() == ()


@pytest.mark.parametrize("shape", [(0, 0), (0, 3), (3, 0)])
@pytest.mark.parametrize("mode", ALL_MODES, ids=lambda m: m.name)
def test_empty_matrix_is_immediately_done(shape, mode):
    A = FieldMatrix.from_rows(QQ, [[]] * shape[0] if shape[0] else [], ncols=shape[1])
    e = FieldEliminator(A, mode)

    if mode.bound(*shape) == 0:
        assert e.step() is True
    e.run()

    assert e.is_done
    assert e.diagonal() == []
    assert e.rank() == 0
    assert e.steps() == ()


# --- State machine ---


@pytest.mark.parametrize(
    "mode, shape, expected",
    [
        (Mode.ROWS_ONLY, (3, 2), 3),
        (Mode.COLS_ONLY, (3, 2), 2),
        (Mode.BOTH, (3, 2), 0),
    ],
    ids=["rows-only", "cols-only", "both"],
)
def test_iteration_bound_on_zero_matrix(mode, shape, expected):
    e = FieldEliminator(FieldMatrix.zeros(QQ, *shape), mode).run()
    assert e.itr == expected


def test_rows_only_never_stops_early():
    A = FieldMatrix.from_rows(QQ, [[1, 2], [2, 4], [0, 0], [3, 6]])
    e = FieldEliminator(A, Mode.ROWS_ONLY).run()

    assert e.itr == 4
    assert e.rank() == 1


def test_both_stops_when_remaining_block_is_zero():
    A = FieldMatrix.from_rows(QQ, [[1, 2], [2, 4], [0, 0], [3, 6]])
    e = FieldEliminator(A, Mode.BOTH).run()

    assert e.itr == 1
    assert e.diagonal() == [1, 0]


def test_single_stepping():
    A = FieldMatrix.from_rows(QQ, [[2, 4], [1, 3]])
    e = FieldEliminator(A)

    assert e.step() is False
    assert e.itr == 1
    assert e.diagonal() == [1, 1]
    assert len(e.steps()) == 3

    assert e.step() is True
    assert e.is_done
    assert e.step() is True
    assert len(e.steps()) == 3


def test_run_is_idempotent():
    A = FieldMatrix.from_rows(QQ, [[0, 3], [2, 1]])
    e = FieldEliminator(A).run()
    steps = e.steps()

    assert e.run() is e
    assert e.steps() == steps


def test_log_replays_partial_runs():
    A = FieldMatrix.from_rows(QQ, [[0, 3, 1], [2, 1, 1], [4, 5, 3]])
    e = FieldEliminator(A)
    while not e.step():
        assert apply_log(e.steps(), A) == e.result()
    assert apply_log(e.steps(), A) == e.result()


def test_input_is_not_mutated():
    A = FieldMatrix.from_rows(QQ, [[2, 4], [1, 3]])
    before = A.copy()
    FieldEliminator(A).run()

    assert A == before


def test_observers_return_snapshots():
    A = FieldMatrix.from_rows(QQ, [[2, 4], [1, 3]])
    e = FieldEliminator(A).run()

    r = e.result()
    r.swap_rows(0, 1)
    assert e.result() != r


@pytest.mark.parametrize(
    "observer",
    ["result", "diagonal", "steps", "rank", "pivots", "left_transform"],
)
def test_observers_before_run_raise(observer):
    e = FieldEliminator(FieldMatrix.identity(QQ, 2))
    with pytest.raises(EliminationStateError):
        getattr(e, observer)()


def test_apply_log_in_place():
    A = FieldMatrix.from_rows(QQ, [[0, 1], [1, 0]])
    out = apply_log([SwapRows(0, 1)], A, in_place=True)

    assert out is A
    assert A == FieldMatrix.identity(QQ, 2)


def test_apply_log_rejects_incompatible_matrix():
    e = FieldEliminator(FieldMatrix.from_rows(QQ, [[0, 0, 1], [0, 0, 0], [1, 0, 0]])).run()
    with pytest.raises(IndexError):
        apply_log(e.steps(), FieldMatrix.identity(QQ, 2))


# --- Functional front-end ---


def test_eliminate_returns_consistent_result():
    A = FieldMatrix.from_rows(QQ, [[1, 2, 3], [2, 4, 6], [1, 1, 1]])
    res = eliminate(A)

    assert res.mode is Mode.BOTH
    assert res.rank == 2
    assert res.diagonal == (1, 1, 0)
    assert res.left_transform() @ A @ res.right_transform() == res.result
    assert res.field == QQ


def test_prime_field_elimination():
    F = PrimeField(7)
    A = FieldMatrix.from_rows(F, [[1, 2, 0], [0, 1, 3], [4, 0, 1]])
    res = eliminate(A)

    assert res.rank == 3
    assert res.left_transform() @ A @ res.right_transform() == FieldMatrix.identity(F, 3)


# --- Debug trace ---


def test_debug_trace_is_logged(caplog):
    caplog.set_level(logging.DEBUG, logger="fieldelim.eliminator")
    A = FieldMatrix.from_rows(QQ, [[0, 1], [1, 0]])
    FieldEliminator(A, debug=True).run()

    assert "R0 <-> R1" in caplog.text
    assert "pivot at (1, 0)" in caplog.text


def test_no_trace_without_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="fieldelim.eliminator")
    A = FieldMatrix.from_rows(QQ, [[0, 1], [1, 0]])
    FieldEliminator(A).run()

    assert caplog.records == []


# --- Mode policy ---


def test_mode_policy():
    assert Mode.BOTH.eliminates_rows and Mode.BOTH.eliminates_cols
    assert Mode.ROWS_ONLY.eliminates_rows and not Mode.ROWS_ONLY.eliminates_cols
    assert Mode.COLS_ONLY.eliminates_cols and not Mode.COLS_ONLY.eliminates_rows
    assert Mode.BOTH.bound(3, 5) == 3
    assert Mode.ROWS_ONLY.bound(3, 5) == 3
    assert Mode.COLS_ONLY.bound(3, 5) == 5
