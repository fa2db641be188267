import os
import unittest
from unittest import mock

import numpy as np

import pycachematrix
from pycachematrix import CacheableMatrix, InversionError, compute_inverse
from pycachematrix._internal.runtime import DEFAULT_TOL, Runtime


class TestRuntimeEnvironment(unittest.TestCase):
    def test_defaults_without_environment(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            defaults = Runtime().defaults()
        self.assertEqual(defaults.method, "auto")
        self.assertEqual(defaults.tol, DEFAULT_TOL)
        self.assertIsNone(defaults.warn_rcond)

    def test_environment_overrides(self):
        env = {
            "PYCACHEMATRIX_INVERT_METHOD": " QR ",
            "PYCACHEMATRIX_RCOND_TOL": "1e-9",
            "PYCACHEMATRIX_RCOND_WARN": "0.001",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            defaults = Runtime().defaults()
        self.assertEqual(defaults.method, "qr")
        self.assertEqual(defaults.tol, 1e-9)
        self.assertEqual(defaults.warn_rcond, 0.001)

    def test_environment_is_read_once(self):
        runtime = Runtime()
        with mock.patch.dict(os.environ, {"PYCACHEMATRIX_INVERT_METHOD": "svd"}, clear=True):
            self.assertEqual(runtime.defaults().method, "svd")
        self.assertEqual(runtime.defaults().method, "svd")

        runtime.reset()
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(runtime.defaults().method, "auto")

    def test_invalid_environment_values(self):
        cases = {
            "PYCACHEMATRIX_INVERT_METHOD": "cholesky",
            "PYCACHEMATRIX_RCOND_TOL": "tiny",
            "PYCACHEMATRIX_RCOND_WARN": "-1",
        }
        for var, raw in cases.items():
            with self.subTest(var=var):
                with mock.patch.dict(os.environ, {var: raw}, clear=True):
                    with self.assertRaisesRegex(ValueError, var):
                        Runtime().defaults()

    def test_resolve_prefers_call_options(self):
        runtime = Runtime()
        with mock.patch.dict(os.environ, {"PYCACHEMATRIX_INVERT_METHOD": "svd"}, clear=True):
            resolved = runtime.resolve(method="gauss", tol=0)
        self.assertEqual(resolved.method, "gauss")
        self.assertEqual(resolved.tol, 0.0)


class TestPublicDefaults(unittest.TestCase):
    def setUp(self):
        self._saved = pycachematrix.get_inversion_defaults()

    def tearDown(self):
        pycachematrix.set_inversion_defaults(
            method=self._saved.method, tol=self._saved.tol, warn_rcond=self._saved.warn_rcond
        )

    def test_set_defaults_changes_invert(self):
        a = np.diag([1.0, 1e-6])
        pycachematrix.set_inversion_defaults(tol=1e-3)
        with self.assertRaises(InversionError):
            pycachematrix.invert(a)
        np.testing.assert_allclose(pycachematrix.invert(a, tol=1e-9), np.diag([1.0, 1e6]))

    def test_set_defaults_validation(self):
        with self.assertRaises(ValueError):
            pycachematrix.set_inversion_defaults(method="cholesky")
        with self.assertRaises(TypeError):
            pycachematrix.set_inversion_defaults(pivoting=True)

    def test_set_defaults_rejects_bad_tolerances(self):
        before = pycachematrix.get_inversion_defaults()
        bad = [
            {"tol": "tiny"},
            {"tol": -1e-3},
            {"tol": float("nan")},
            {"tol": None},
            {"warn_rcond": "often"},
            {"warn_rcond": -0.5},
            {"warn_rcond": float("nan")},
        ]
        for changes in bad:
            with self.subTest(changes=changes):
                with self.assertRaises(ValueError):
                    pycachematrix.set_inversion_defaults(**changes)
        self.assertEqual(pycachematrix.get_inversion_defaults(), before)

        # A rejected default must not break later lookups.
        inv = compute_inverse(CacheableMatrix(np.eye(2) * 2.0))
        np.testing.assert_allclose(inv, np.eye(2) * 0.5)

    def test_set_defaults_coerces_numbers(self):
        active = pycachematrix.set_inversion_defaults(tol="1e-9", warn_rcond=1)
        self.assertEqual(active.tol, 1e-9)
        self.assertEqual(active.warn_rcond, 1.0)
        self.assertIsNone(pycachematrix.set_inversion_defaults(warn_rcond=None).warn_rcond)

    def test_call_options_are_validated(self):
        with self.assertRaisesRegex(ValueError, "tol"):
            pycachematrix.invert(np.eye(2), tol=-1.0)
        with self.assertRaisesRegex(ValueError, "warn_rcond"):
            pycachematrix.invert(np.eye(2), warn_rcond=float("nan"))

    def test_reset_rereads_environment(self):
        pycachematrix.set_inversion_defaults(method="gauss")
        with mock.patch.dict(os.environ, {"PYCACHEMATRIX_INVERT_METHOD": "svd"}, clear=True):
            pycachematrix.reset_inversion_defaults()
            self.assertEqual(pycachematrix.get_inversion_defaults().method, "svd")
            pycachematrix.reset_inversion_defaults()
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(pycachematrix.get_inversion_defaults().method, "auto")
        pycachematrix.reset_inversion_defaults()

    def test_temporary_defaults_restore(self):
        before = pycachematrix.get_inversion_defaults()
        with pycachematrix.temporary_inversion_defaults(method="gauss") as active:
            self.assertEqual(active.method, "gauss")
            self.assertEqual(pycachematrix.get_inversion_defaults().method, "gauss")
        self.assertEqual(pycachematrix.get_inversion_defaults(), before)

    def test_temporary_defaults_restore_on_error(self):
        before = pycachematrix.get_inversion_defaults()
        with self.assertRaises(InversionError):
            with pycachematrix.temporary_inversion_defaults(tol=0.5):
                pycachematrix.invert(np.diag([1.0, 0.1]))
        self.assertEqual(pycachematrix.get_inversion_defaults(), before)


if __name__ == "__main__":
    unittest.main()
