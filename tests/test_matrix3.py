# tests/test_matrix3.py

import unittest
import math
import numpy as np
from rotkit import Matrix3


class TestMatrix3Construction(unittest.TestCase):
    def setUp(self):
        self.M = Matrix3.from_components(
            1, 2, 3,
            4, 5, 6,
            7, 8, 10,
        )

    def test_default_is_identity(self):
        np.testing.assert_array_equal(Matrix3().matrix, np.eye(3))
        self.assertEqual(Matrix3(), Matrix3.IDENTITY)

    def test_constants(self):
        np.testing.assert_array_equal(Matrix3.ZERO.matrix, np.zeros((3, 3)))
        np.testing.assert_array_equal(Matrix3.IDENTITY.matrix, np.eye(3))
        self.assertEqual(Matrix3.identity(), Matrix3.IDENTITY)
        self.assertEqual(Matrix3.zero(), Matrix3.ZERO)

    def test_component_names(self):
        # first letter is the column, second the row
        self.assertEqual(self.M.xx, 1.0)
        self.assertEqual(self.M.yx, 2.0)
        self.assertEqual(self.M.zx, 3.0)
        self.assertEqual(self.M.xy, 4.0)
        self.assertEqual(self.M.yy, 5.0)
        self.assertEqual(self.M.zy, 6.0)
        self.assertEqual(self.M.xz, 7.0)
        self.assertEqual(self.M.yz, 8.0)
        self.assertEqual(self.M.zz, 10.0)

    def test_columns_and_rows(self):
        np.testing.assert_array_equal(self.M.x, [1, 4, 7])
        np.testing.assert_array_equal(self.M.y, [2, 5, 8])
        np.testing.assert_array_equal(self.M.z, [3, 6, 10])
        np.testing.assert_array_equal(self.M.x_row, [1, 2, 3])
        np.testing.assert_array_equal(self.M.y_row, [4, 5, 6])
        np.testing.assert_array_equal(self.M.z_row, [7, 8, 10])

    def test_from_columns_and_rows(self):
        by_cols = Matrix3.from_columns(self.M.x, self.M.y, self.M.z)
        by_rows = Matrix3.from_rows(self.M.x_row, self.M.y_row, self.M.z_row)
        self.assertEqual(by_cols, self.M)
        self.assertEqual(by_rows, self.M)

    def test_from_flat_array_and_list(self):
        flat = np.array([1, 2, 3, 4, 5, 6, 7, 8, 10], dtype=float)
        self.assertEqual(Matrix3.from_flat_array(flat), self.M)
        self.assertEqual(Matrix3.from_list(flat.tolist()), self.M)
        self.assertEqual(self.M.to_list(), flat.tolist())
        np.testing.assert_array_equal(self.M.flatten(), flat)

    def test_invalid_shapes(self):
        with self.assertRaises(ValueError):
            Matrix3(np.zeros((4, 4)))
        with self.assertRaises(ValueError):
            Matrix3.from_flat_array(np.zeros(8))
        with self.assertRaises(ValueError):
            Matrix3.from_list([0.0] * 10)
        with self.assertRaises(ValueError):
            Matrix3.from_columns([1, 0], [0, 1, 0], [0, 0, 1])

    def test_constructor_copies_input(self):
        source = np.eye(3)
        m = Matrix3(source)
        source[0, 0] = 5.0
        self.assertEqual(m.xx, 1.0)

    def test_immutable(self):
        with self.assertRaises(ValueError):
            self.M.matrix[0, 0] = 42.0
        # accessors hand out copies
        col = self.M.x
        col[0] = 42.0
        self.assertEqual(self.M.xx, 1.0)


class TestMatrix3Arithmetic(unittest.TestCase):
    def setUp(self):
        self.A = Matrix3([[2.0, 1.0, 0.5],
                          [0.3, 3.0, 1.0],
                          [0.2, -1.0, 4.0]])
        self.B = Matrix3([[1.0, -0.4, 0.0],
                          [0.7, 2.0, 0.1],
                          [-0.3, 0.5, 1.5]])

    def test_negation(self):
        np.testing.assert_array_equal((-self.A).matrix, -self.A.matrix)
        self.assertEqual(self.A.neg(), -self.A)

    def test_add_sub(self):
        np.testing.assert_array_equal((self.A + self.B).matrix, self.A.matrix + self.B.matrix)
        np.testing.assert_array_equal((self.A - self.B).matrix, self.A.matrix - self.B.matrix)
        self.assertEqual(self.A.add(self.B), self.A + self.B)
        self.assertEqual(self.A.sub(self.B), self.A - self.B)

    def test_scalar_multiplication_commutes(self):
        self.assertEqual(2.5 * self.A, self.A * 2.5)
        self.assertEqual(np.float64(2.5) * self.A, self.A * 2.5)
        np.testing.assert_array_equal((self.A * 3).matrix, self.A.matrix * 3)

    def test_scalar_division_is_reciprocal_multiplication(self):
        self.assertEqual(self.A / 4.0, self.A * 0.25)
        self.assertEqual(self.A.div_scalar(3.0), self.A * (1.0 / 3.0))

    def test_scalar_division_by_zero(self):
        out = Matrix3.IDENTITY / 0.0
        diag = np.diag(out.matrix)
        off = out.matrix[~np.eye(3, dtype=bool)]
        self.assertTrue(np.all(np.isposinf(diag)))
        self.assertTrue(np.all(np.isnan(off)))

    def test_matrix_vector(self):
        v = np.array([1.0, -2.0, 0.5])
        np.testing.assert_allclose(self.A * v, self.A.matrix @ v, atol=1e-12)
        np.testing.assert_allclose(self.A @ v, self.A.matrix @ v, atol=1e-12)
        np.testing.assert_allclose(self.A * [1.0, -2.0, 0.5], self.A.matrix @ v, atol=1e-12)
        # basis vectors map to columns
        np.testing.assert_allclose(self.A * [1, 0, 0], self.A.x, atol=0)

    def test_matrix_matrix(self):
        np.testing.assert_allclose((self.A * self.B).matrix, self.A.matrix @ self.B.matrix, atol=1e-12)
        self.assertEqual(self.A @ self.B, self.A * self.B)
        self.assertEqual(self.A.matmul(self.B), self.A * self.B)

    def test_matrix_raw_array(self):
        out = self.A @ self.B.matrix
        self.assertIsInstance(out, np.ndarray)
        np.testing.assert_array_equal(out, (self.A @ self.B).matrix)
        np.testing.assert_array_equal(self.A * np.eye(3), self.A.matrix)
        np.testing.assert_array_equal(self.A @ np.eye(3).tolist(), self.A.matrix)

    def test_unsupported_operands(self):
        with self.assertRaises(TypeError):
            self.A + 1.0
        with self.assertRaises(TypeError):
            self.A * "abc"
        with self.assertRaises(TypeError):
            np.array([1.0, 2.0, 3.0]) * self.A
        with self.assertRaises(TypeError):
            self.A @ np.ones((4, 4))
        with self.assertRaises(TypeError):
            self.A * np.ones(4)

    def test_lerp(self):
        self.assertEqual(self.A.lerp(self.B, 0.0), self.A)
        self.assertEqual(self.A.lerp(self.B, 1.0), self.B)
        np.testing.assert_allclose(self.A.lerp(self.B, 0.5).matrix,
                                   ((self.A + self.B) / 2.0).matrix, atol=1e-15)


class TestMatrix3ScalarProperties(unittest.TestCase):
    def test_norm(self):
        self.assertEqual(Matrix3.IDENTITY.norm_sq(), 3.0)
        self.assertAlmostEqual(Matrix3.IDENTITY.norm(), math.sqrt(3.0))
        m = Matrix3.from_list([1, 2, 3, 4, 5, 6, 7, 8, 9])
        self.assertEqual(m.norm_sq(), 285.0)
        self.assertAlmostEqual(m.norm(), np.linalg.norm(m.matrix))

    def test_det(self):
        self.assertEqual(Matrix3(np.diag([2.0, 3.0, 4.0])).det(), 24.0)
        self.assertEqual(Matrix3.ZERO.det(), 0.0)
        m = Matrix3([[2.0, 1.0, 0.5], [0.3, 3.0, 1.0], [0.2, -1.0, 4.0]])
        self.assertAlmostEqual(m.det(), np.linalg.det(m.matrix), places=12)
        # a reflection flips the sign
        self.assertEqual(Matrix3(np.diag([-1.0, 1.0, 1.0])).det(), -1.0)

    def test_trace(self):
        m = Matrix3.from_list([1, 2, 3, 4, 5, 6, 7, 8, 9])
        self.assertEqual(m.trace(), 15.0)


class TestMatrix3Inverse(unittest.TestCase):
    def setUp(self):
        self.matrices = [
            Matrix3([[2.0, 1.0, 0.5], [0.3, 3.0, 1.0], [0.2, -1.0, 4.0]]),
            Matrix3([[1.0, -0.4, 0.0], [0.7, 2.0, 0.1], [-0.3, 0.5, 1.5]]),
            Matrix3([[0.0, 0.0, 1.0], [0.0, 1.0, 0.0], [-1.0, 0.0, 0.0]]),
            Matrix3(np.diag([2.0, -3.0, 0.5])),
        ]

    def test_inverse_identity(self):
        for m in self.matrices:
            np.testing.assert_allclose((m * m.inv()).matrix, np.eye(3), atol=1e-12)
            np.testing.assert_allclose((m.inv() * m).matrix, np.eye(3), atol=1e-12)

    def test_inverse_matches_numpy(self):
        for m in self.matrices:
            np.testing.assert_allclose(m.inv().matrix, np.linalg.inv(m.matrix), atol=1e-12)

    def test_inv_transpose_is_bit_identical(self):
        for m in self.matrices:
            np.testing.assert_array_equal(m.inv_transpose().matrix, m.inv().transpose().matrix)

    def test_transpose_involution(self):
        for m in self.matrices:
            self.assertEqual(m.transpose().transpose(), m)
            np.testing.assert_array_equal(m.transpose().matrix, m.matrix.T)

    def test_division(self):
        a, b = self.matrices[0], self.matrices[1]
        self.assertEqual(a / b, a * b.inv())
        self.assertEqual(a.div(b), a * b.inv())
        self.assertEqual(2.0 / b, b.inv() * 2.0)

    def test_singular_inverse_propagates_nan(self):
        self.assertTrue(np.all(np.isnan(Matrix3.ZERO.inv().matrix)))
        singular = Matrix3([[1.0, 2.0, 3.0], [2.0, 4.0, 6.0], [1.0, 0.0, 1.0]])
        self.assertEqual(singular.det(), 0.0)
        self.assertFalse(np.all(np.isfinite(singular.inv().matrix)))
        self.assertFalse(np.all(np.isfinite((Matrix3.IDENTITY / singular).matrix)))


if __name__ == '__main__':
    unittest.main()
