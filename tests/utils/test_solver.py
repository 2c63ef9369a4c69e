"""Unit tests for the solver module."""

import os
import unittest
from unittest.mock import MagicMock, PropertyMock, patch

from sitemix.config.params import RuntimeParams
from sitemix.registry import SOLVER_ADAPTER_REGISTRY
from sitemix.utils.solver import CbcAdapter, GurobiAdapter, pick_solver


class TestPickSolver(unittest.TestCase):
    """Test cases for pick_solver function."""

    def setUp(self):
        """Backup and clear SITEMIX_SOLVER before each test to avoid side-effects."""
        self._orig_solver_env = os.environ.get("SITEMIX_SOLVER")
        os.environ.pop("SITEMIX_SOLVER", None)

    def tearDown(self):
        """Restore original SITEMIX_SOLVER after each test."""
        if self._orig_solver_env is not None:
            os.environ["SITEMIX_SOLVER"] = self._orig_solver_env
        else:
            os.environ.pop("SITEMIX_SOLVER", None)

    @patch("pulp.GUROBI_CMD")
    def test_pick_solver_explicit_gurobi(self, mock_gurobi):
        """Test explicitly selecting Gurobi solver through the environment."""
        os.environ["SITEMIX_SOLVER"] = "gurobi"
        mock_solver = MagicMock()
        mock_gurobi.return_value = mock_solver

        params = RuntimeParams(verbose=False, gap_rel=0.0, time_limit=180)
        result = pick_solver(params)

        mock_gurobi.assert_called_once_with(msg=0, gapRel=0.0, options=[("TimeLimit", 180)])
        self.assertEqual(result, mock_solver)

    @patch("pulp.PULP_CBC_CMD")
    def test_pick_solver_explicit_cbc(self, mock_cbc):
        """Test explicitly selecting CBC solver through the parameters."""
        mock_solver = MagicMock()
        mock_cbc.return_value = mock_solver

        params = RuntimeParams(verbose=True, solver="cbc", time_limit=180)
        result = pick_solver(params)

        mock_cbc.assert_called_once_with(msg=1, timeLimit=180)
        self.assertEqual(result, mock_solver)

    @patch("pulp.PULP_CBC_CMD")
    def test_environment_overrides_parameters(self, mock_cbc):
        os.environ["SITEMIX_SOLVER"] = "cbc"
        params = RuntimeParams(solver="gurobi", time_limit=None)
        pick_solver(params)
        mock_cbc.assert_called_once_with(msg=0)

    @patch("pulp.GUROBI_CMD")
    @patch("pulp.PULP_CBC_CMD")
    def test_pick_solver_auto_gurobi_success(self, mock_cbc, mock_gurobi):
        """Test auto mode using Gurobi when it is installed."""
        mock_gurobi_solver = MagicMock()
        mock_gurobi.return_value = mock_gurobi_solver

        with patch.object(GurobiAdapter, "available", new_callable=PropertyMock, return_value=True):
            result = pick_solver(RuntimeParams(time_limit=180))

        mock_gurobi.assert_called_once_with(msg=0, options=[("TimeLimit", 180)])
        mock_cbc.assert_not_called()
        self.assertEqual(result, mock_gurobi_solver)

    @patch("pulp.GUROBI_CMD")
    @patch("pulp.PULP_CBC_CMD")
    def test_pick_solver_auto_fallback_to_cbc(self, mock_cbc, mock_gurobi):
        """Test auto mode falling back to CBC when Gurobi fails."""
        mock_gurobi.side_effect = OSError("Gurobi not found")
        mock_cbc_solver = MagicMock()
        mock_cbc.return_value = mock_cbc_solver

        with patch.object(GurobiAdapter, "available", new_callable=PropertyMock, return_value=True):
            result = pick_solver(RuntimeParams(time_limit=180))

        mock_cbc.assert_called_once_with(msg=0, timeLimit=180)
        self.assertEqual(result, mock_cbc_solver)

    @patch("pulp.GUROBI_CMD")
    @patch("pulp.PULP_CBC_CMD")
    def test_pick_solver_auto_without_gurobi(self, mock_cbc, mock_gurobi):
        with patch.object(GurobiAdapter, "available", new_callable=PropertyMock, return_value=False):
            pick_solver(RuntimeParams(time_limit=0))

        mock_gurobi.assert_not_called()
        mock_cbc.assert_called_once_with(msg=0)


    def test_unknown_solver_in_environment(self):
        os.environ["SITEMIX_SOLVER"] = "glpk"
        with self.assertRaises(ValueError):
            pick_solver(RuntimeParams())


class TestSolverAdapters(unittest.TestCase):
    def test_adapters_are_registered(self):
        self.assertIs(SOLVER_ADAPTER_REGISTRY["gurobi"], GurobiAdapter)
        self.assertIs(SOLVER_ADAPTER_REGISTRY["cbc"], CbcAdapter)

    def test_adapter_names(self):
        self.assertEqual(GurobiAdapter().name, "Gurobi")
        self.assertEqual(CbcAdapter().name, "CBC")
        self.assertTrue(CbcAdapter().available)


if __name__ == "__main__":
    unittest.main()
