"""
tests/test_nearest_pd.py — Higham Nearest-Correlation Projection

Symmetry, unit diagonal, strict positive-definiteness, idempotence on
valid inputs, bounded iterations and eigensolver injection.
"""

import logging

import numpy as np
import pytest

from risk.nearest_pd import (
    get_eigensolver,
    jacobi_eigh,
    nearest_pd,
    nearest_pd_with_info,
    numpy_eigh,
    scipy_eigh,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def valid_corr():
    return np.array([
        [1.0,  0.2,  0.3],
        [0.2,  1.0, -0.1],
        [0.3, -0.1,  1.0],
    ])


@pytest.fixture
def high_corr():
    """All pairwise correlations at 0.9."""
    m = np.full((3, 3), 0.9)
    np.fill_diagonal(m, 1.0)
    return m


@pytest.fixture
def indefinite():
    """Symmetric, unit diagonal, one negative eigenvalue."""
    return np.array([
        [1.0,  0.9,  0.9],
        [0.9,  1.0, -0.9],
        [0.9, -0.9,  1.0],
    ])


def _assert_valid_correlation(m):
    np.testing.assert_allclose(m, m.T, atol=1e-8)
    np.testing.assert_allclose(np.diag(m), 1.0, atol=1e-8)
    assert np.all(np.linalg.eigvalsh(m) > 0.0)


# ---------------------------------------------------------------------------
# Projection properties
# ---------------------------------------------------------------------------

class TestNearestPD:

    def test_high_correlation(self, high_corr):
        _assert_valid_correlation(nearest_pd(high_corr))

    def test_indefinite_input(self, indefinite):
        assert np.linalg.eigvalsh(indefinite).min() < 0
        _assert_valid_correlation(nearest_pd(indefinite))

    def test_idempotent_on_valid_matrix(self, valid_corr):
        out = nearest_pd(valid_corr)
        np.testing.assert_allclose(out, valid_corr, atol=1e-10)

    def test_converges_immediately_on_valid_matrix(self, valid_corr):
        info = nearest_pd_with_info(valid_corr)
        assert info.converged
        assert info.iterations == 1
        assert not info.rescaled

    def test_asymmetric_input_is_symmetrised(self, valid_corr):
        skewed = valid_corr.copy()
        skewed[0, 1] += 0.1
        out = nearest_pd(skewed)
        _assert_valid_correlation(out)
        assert out[0, 1] == pytest.approx(0.25, abs=1e-8)

    def test_iteration_cap(self, indefinite):
        info = nearest_pd_with_info(indefinite, max_iter=3)
        assert info.iterations <= 3
        _assert_valid_correlation(info.matrix)

    def test_invalid_iteration_cap(self, valid_corr):
        with pytest.raises(ValueError):
            nearest_pd(valid_corr, max_iter=0)

    def test_random_symmetric_inputs(self):
        rng = np.random.default_rng(2024)
        for n in (2, 4, 7):
            a = rng.uniform(-1.0, 1.0, (n, n))
            m = 0.5 * (a + a.T)
            np.fill_diagonal(m, 1.0)
            _assert_valid_correlation(nearest_pd(m))

    def test_does_not_mutate_input(self, indefinite):
        before = indefinite.copy()
        nearest_pd(indefinite)
        np.testing.assert_array_equal(indefinite, before)

    def test_min_eigenvalue_diagnostic(self, high_corr):
        info = nearest_pd_with_info(high_corr)
        assert info.min_eigenvalue > 0


# ---------------------------------------------------------------------------
# Rescaled floored iterate
# ---------------------------------------------------------------------------

class TestRescaledFallback:

    def test_truncated_run_is_rescaled(self, indefinite):
        info = nearest_pd_with_info(indefinite, max_iter=1)
        assert info.converged is False
        assert info.rescaled is True
        assert info.iterations == 1
        _assert_valid_correlation(info.matrix)
        assert info.min_eigenvalue > 0.0

    def test_converged_run_on_indefinite_input_is_rescaled(self, indefinite):
        info = nearest_pd_with_info(indefinite)
        assert info.converged
        assert info.rescaled
        _assert_valid_correlation(info.matrix)

    def test_random_inputs_stay_strictly_pd(self):
        rng = np.random.default_rng(7)
        for n in range(3, 12):
            a = rng.uniform(-1.0, 1.0, (n, n))
            m = 0.5 * (a + a.T)
            np.fill_diagonal(m, 1.0)
            info = nearest_pd_with_info(m)
            _assert_valid_correlation(info.matrix)
            if np.linalg.eigvalsh(m).min() < 0:
                assert not np.allclose(info.matrix, m)

    def test_no_convergence_logged_at_debug(self, indefinite, caplog):
        with caplog.at_level(logging.DEBUG, logger="risk.nearest_pd"):
            nearest_pd_with_info(indefinite, max_iter=1)
        assert "[NearestPD] no convergence after 1 iterations" in caplog.text
        assert "[NearestPD] rescaled floored iterate" in caplog.text

    def test_valid_input_logs_nothing(self, valid_corr, caplog):
        with caplog.at_level(logging.DEBUG, logger="risk.nearest_pd"):
            info = nearest_pd_with_info(valid_corr)
        assert not info.rescaled
        assert "[NearestPD]" not in caplog.text


# ---------------------------------------------------------------------------
# Eigensolvers
# ---------------------------------------------------------------------------

class TestEigensolvers:

    @pytest.fixture
    def sym(self):
        rng = np.random.default_rng(5)
        a = rng.normal(size=(6, 6))
        return 0.5 * (a + a.T)

    @pytest.mark.parametrize("solver", [numpy_eigh, scipy_eigh, jacobi_eigh])
    def test_reconstruction(self, solver, sym):
        vals, vecs = solver(sym)
        np.testing.assert_allclose((vecs * vals) @ vecs.T, sym, atol=1e-9)
        np.testing.assert_allclose(vecs.T @ vecs, np.eye(6), atol=1e-9)

    def test_jacobi_matches_lapack(self, sym):
        vals_j, _ = jacobi_eigh(sym)
        vals_n, _ = numpy_eigh(sym)
        np.testing.assert_allclose(vals_j, vals_n, atol=1e-9)

    @pytest.mark.parametrize("name", ["numpy", "scipy", "jacobi"])
    def test_projection_with_named_solver(self, name, valid_corr):
        blended = 0.5 * valid_corr + 0.5
        out = nearest_pd(blended, eigensolver=name)
        np.testing.assert_allclose(out, blended, atol=1e-9)

    def test_jacobi_on_indefinite(self, indefinite):
        _assert_valid_correlation(nearest_pd(indefinite, eigensolver="jacobi"))

    def test_injected_callable(self, indefinite):
        calls = []

        def counting(m):
            calls.append(m.shape)
            return numpy_eigh(m)

        out = nearest_pd(indefinite, eigensolver=counting)
        assert len(calls) >= 1
        np.testing.assert_allclose(out, nearest_pd(indefinite), atol=1e-12)

    def test_lookup(self):
        assert get_eigensolver("numpy") is numpy_eigh
        assert get_eigensolver("JACOBI") is jacobi_eigh
        assert callable(get_eigensolver())

    def test_unknown_solver(self):
        with pytest.raises(ValueError, match="Unknown eigensolver"):
            get_eigensolver("power-iteration")
