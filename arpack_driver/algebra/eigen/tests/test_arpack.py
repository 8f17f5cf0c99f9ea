"""
Test suite for the ARPACK facade.

Runs against the dense reference kernel, so it checks the driver, the facade
and their contract without the native library.
"""

import numpy as np
import pytest
import scipy.sparse as sp
from scipy.sparse.linalg import LinearOperator

from arpack_driver.algebra.eigen.arpack import (
    eigenvalues, eigenvectors, eigenvalues_dense, eigenvectors_dense, ArpackEigensolver,
    check_square, infer_domain,
)
from arpack_driver.algebra.eigen.errors import IllegalParameterError, NonSquareInputError
from arpack_driver.algebra.eigen.problem import ScalarDomain, Which
from arpack_driver.algebra.eigen.result import EigenResult
from arpack_driver.algebra.utils import MACHINE_EPS

from conftest import create_symmetric_matrix, create_nonsymmetric_matrix, ring_matvec

# ----------------------------------
#! Test classes
# ----------------------------------

class TestClosureEntryPoints:

    def test_ring_largest_real_part(self, reference_kernel):
        """The ring operator has largest eigenvalue 2 (constant vector)."""
        n       = 100
        vals    = eigenvalues(ring_matvec(n), n, 'LR', 2, 10, 100, kernel=reference_kernel)
        assert vals.shape == (2,)
        top     = vals[np.argmax(vals.real)]
        assert abs(top.real - 2.0) < 1e3 * MACHINE_EPS
        assert abs(top.imag) < 1e3 * MACHINE_EPS

    def test_eigenvectors_shape_and_pairs(self, reference_kernel):
        n           = 30
        vals, vecs  = eigenvectors(ring_matvec(n), n, 'LR', 3, 10, 100, kernel=reference_kernel)
        assert vals.shape == (3,)
        assert vecs.shape == (n, 3)
        op = ring_matvec(n)
        for i in range(3):
            np.testing.assert_allclose(op(vecs[:, i]), vals[i] * vecs[:, i], atol=1e-10)

    def test_constant_vector_is_top_eigenvector(self, reference_kernel):
        n           = 20
        vals, vecs  = eigenvectors(ring_matvec(n), n, 'LR', 1, 4, 50, kernel=reference_kernel)
        v           = vecs[:, 0] / vecs[0, 0]
        np.testing.assert_allclose(v, np.ones(n), atol=1e-10)

    def test_inplace_operator(self, reference_kernel):
        n = 16

        def ring_into(x, out):
            out[:] = np.roll(x, -1) + np.roll(x, 1)

        a = eigenvalues(ring_into, n, 'LR', 2, 6, 50, kernel=reference_kernel)
        b = eigenvalues(ring_matvec(n), n, 'LR', 2, 6, 50, kernel=reference_kernel)
        np.testing.assert_allclose(a, b)

    def test_real_symmetric_domain(self, reference_kernel):
        n       = 16
        vals    = eigenvalues(ring_matvec(n), n, 'LA', 1, 5, 50, domain='real_symmetric', kernel=reference_kernel)
        assert vals.dtype == np.float64
        assert abs(vals[0] - 2.0) < 1e3 * MACHINE_EPS

    def test_fft_stencil_in_real_symmetric_domain(self, reference_kernel):
        n       = 32
        symbol  = 2 * np.cos(2 * np.pi * np.arange(n) / n)
        vals    = eigenvalues(lambda x: np.fft.ifft(np.fft.fft(x) * symbol), n, 'LA', 1, 5, 50,
                              domain='real_symmetric', kernel=reference_kernel)
        assert abs(vals[0] - 2.0) < 1e-12

    def test_smallest_real_part(self, reference_kernel):
        n       = 16
        vals    = eigenvalues(ring_matvec(n), n, Which.SMALLEST_REAL_PART, 1, 5, 50, kernel=reference_kernel)
        assert abs(vals[0].real + 2.0) < 1e3 * MACHINE_EPS

    @pytest.mark.parametrize("nev, ncv", [(2, 2), (2, 3), (2, 101)])
    def test_illegal_subspace_size(self, reference_kernel, nev, ncv):
        with pytest.raises(IllegalParameterError):
            eigenvalues(ring_matvec(100), 100, 'LM', nev, ncv, 100, kernel=reference_kernel)
        assert reference_kernel.calls == 0

    def test_zero_maxiter(self, reference_kernel):
        with pytest.raises(IllegalParameterError):
            eigenvalues(ring_matvec(10), 10, 'LM', 2, 5, 0, kernel=reference_kernel)

class TestDenseEntryPoints:

    def test_non_square_rejected_before_solver(self, reference_kernel):
        A = np.ones((3, 4))
        with pytest.raises(NonSquareInputError):
            eigenvalues_dense(A, 'LM', 1, 3, 10, kernel=reference_kernel)
        with pytest.raises(NonSquareInputError):
            eigenvectors_dense(A, 'LM', 1, 3, 10, kernel=reference_kernel)
        assert reference_kernel.calls == 0

    def test_one_dimensional_rejected(self):
        with pytest.raises(NonSquareInputError):
            check_square(np.ones(5))

    def test_dense_matches_closure(self, reference_kernel):
        # distinct real eigenvalues 1..n, no ties in the selection
        n       = 24
        A       = np.diag(np.arange(1.0, n + 1)) + np.triu(create_nonsymmetric_matrix(n), k=1)
        dense   = eigenvalues_dense(A, 'LM', 3, 10, 100, kernel=reference_kernel)
        closure = eigenvalues(lambda x: A @ x, n, 'LM', 3, 10, 100, kernel=reference_kernel)
        np.testing.assert_allclose(dense, closure)

    @pytest.mark.parametrize("which", ['LM', 'SM', 'LR', 'SR', 'LA', 'SA'])
    def test_dense_matches_closure_symmetric(self, reference_kernel, which):
        n       = 12
        A       = create_symmetric_matrix(n)
        dense   = eigenvalues_dense(A, which, 2, 6, 50, kernel=reference_kernel)
        closure = eigenvalues(lambda x: A @ x, n, which, 2, 6, 50, kernel=reference_kernel)
        assert dense.dtype == closure.dtype
        np.testing.assert_allclose(dense, closure)

    @pytest.mark.parametrize("which", ['LI', 'SI'])
    def test_imaginary_selection_on_symmetric_matrix(self, reference_kernel, which):
        n           = 12
        A           = create_symmetric_matrix(n)
        spectrum    = np.linalg.eigvalsh(A)
        dense       = eigenvalues_dense(A, which, 2, 6, 50, kernel=reference_kernel)
        closure     = eigenvalues(lambda x: A @ x, n, which, 2, 6, 50, kernel=reference_kernel)
        for vals in (dense, closure):
            assert vals.shape == (2,)
            for v in vals:
                assert abs(v.imag) < 1e-10
                assert np.min(np.abs(spectrum - v.real)) < 1e-10

    def test_dense_vectors(self, reference_kernel):
        n           = 12
        A           = create_nonsymmetric_matrix(n)
        vals, vecs  = eigenvectors_dense(A, 'LM', 2, 6, 50, kernel=reference_kernel)
        assert vecs.shape == (n, 2)
        np.testing.assert_allclose(A @ vecs, vecs * vals, atol=1e-10)

    def test_symmetric_inferred_on_request(self, reference_kernel):
        A = create_symmetric_matrix(10)
        assert infer_domain(A) is ScalarDomain.REAL_SYMMETRIC
        vals = eigenvalues_dense(A, 'SA', 2, 6, 50, domain='auto', kernel=reference_kernel)
        assert vals.dtype == np.float64
        np.testing.assert_allclose(vals, np.linalg.eigvalsh(A)[:2], atol=1e-10)

    def test_general_domain_by_default(self, reference_kernel):
        A       = create_symmetric_matrix(10)
        vals    = eigenvalues_dense(A, 'SR', 2, 6, 50, kernel=reference_kernel)
        assert np.iscomplexobj(vals)
        np.testing.assert_allclose(np.sort(vals.real), np.linalg.eigvalsh(A)[:2], atol=1e-10)

    def test_symmetric_domain_opt_in(self, reference_kernel):
        A       = create_symmetric_matrix(10)
        vals    = eigenvalues_dense(A, 'LA', 1, 6, 50, domain='real_symmetric', kernel=reference_kernel)
        assert vals.dtype == np.float64
        assert abs(vals[0] - np.linalg.eigvalsh(A)[-1]) < 1e-10

    def test_sparse_matrix(self, reference_kernel):
        n       = 20
        A       = sp.diags([np.ones(n - 1), np.ones(n - 1)], [-1, 1], format='csr')
        vals    = eigenvalues_dense(A, 'LA', 1, 5, 50, kernel=reference_kernel)
        assert abs(vals[0] - 2 * np.cos(np.pi / (n + 1))) < 1e-10

    def test_linear_operator(self, reference_kernel):
        n   = 12
        op  = LinearOperator((n, n), matvec=ring_matvec(n), dtype=np.float64)
        assert infer_domain(op) is ScalarDomain.COMPLEX_GENERAL
        vals = eigenvalues_dense(op, 'LR', 1, 4, 50, kernel=reference_kernel)
        assert abs(vals[0].real - 2.0) < 1e3 * MACHINE_EPS

    def test_complex_matrix_is_general(self):
        A = create_symmetric_matrix(6) + 1j * np.eye(6)
        assert infer_domain(A) is ScalarDomain.COMPLEX_GENERAL

    def test_nonsymmetric_is_general(self):
        assert infer_domain(create_nonsymmetric_matrix(6)) is ScalarDomain.COMPLEX_GENERAL

class TestArpackEigensolver:

    def test_solve_matrix(self, reference_kernel):
        A       = create_symmetric_matrix(30)
        solver  = ArpackEigensolver(k=4, which='SA', domain='auto', kernel=reference_kernel)
        res     = solver.solve(A=A)
        assert isinstance(res, EigenResult)
        assert res.eigenvectors.shape == (30, 4)
        assert res.eigenvalues.dtype == np.float64
        np.testing.assert_allclose(res.eigenvalues, np.linalg.eigvalsh(A)[:4], atol=1e-10)
        assert res.converged

    def test_solve_matvec(self, reference_kernel):
        n       = 25
        solver  = ArpackEigensolver(k=2, which='LR', return_vectors=False, kernel=reference_kernel)
        res     = solver.solve(matvec=ring_matvec(n), n=n)
        assert res.eigenvectors is None
        assert res.matvecs == n

    def test_matrix_solve_uses_general_domain_by_default(self, reference_kernel):
        A       = create_symmetric_matrix(12)
        res     = ArpackEigensolver(k=2, which='LI', kernel=reference_kernel).solve(A=A)
        assert np.iscomplexobj(res.eigenvalues)
        assert res.eigenvalues.shape == (2,)

    def test_default_sizes(self):
        solver = ArpackEigensolver(k=3)
        assert solver._sizes(100) == (20, 1000)
        assert solver._sizes(10) == (10, 100)

    def test_missing_arguments(self, reference_kernel):
        solver = ArpackEigensolver(k=2, kernel=reference_kernel)
        with pytest.raises(ValueError):
            solver.solve()
        with pytest.raises(ValueError):
            solver.solve(matvec=ring_matvec(10))

    def test_invalid_k(self):
        with pytest.raises(ValueError):
            ArpackEigensolver(k=0)

    def test_iterative(self):
        assert ArpackEigensolver.is_iterative_solver()

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
