"""Unit tests for the run_tests.py command builder."""

import sys
import pytest

from run_tests import build_command, marker_expression, parse_args


class TestMarkerExpression:

    @pytest.mark.unit
    def test_suite_and_fast_are_combined(self):
        assert marker_expression("unit", fast=True) == "unit and not slow"
        assert marker_expression("integration", fast=True) == "integration and not slow"

    @pytest.mark.unit
    def test_single_markers(self):
        assert marker_expression("unit", fast=False) == "unit"
        assert marker_expression("all", fast=True) == "not slow"
        assert marker_expression("all", fast=False) is None


class TestBuildCommand:

    @pytest.mark.unit
    def test_unit_fast_passes_one_marker_option(self):
        cmd = build_command("unit", fast=True)

        assert cmd.count("-m") == 2  # "python -m pytest" plus one marker option
        assert cmd[cmd.index("-m", 2) + 1] == "unit and not slow"
        assert cmd[-1] == "tests/unit"

    @pytest.mark.unit
    def test_all_runs_whole_tree(self):
        cmd = build_command()

        assert cmd[:3] == [sys.executable, "-m", "pytest"]
        assert cmd[-1] == "tests/"
        assert "--cov=shelfscan" not in cmd

    @pytest.mark.unit
    def test_options(self):
        cmd = build_command("integration", coverage=True, verbose=True, failfast=True, keyword="receipt")

        assert "--cov=shelfscan" in cmd
        assert ["-k", "receipt"] == cmd[cmd.index("-k"):cmd.index("-k") + 2]
        assert "-v" in cmd and "-x" in cmd
        assert cmd[-1] == "tests/integration"

    @pytest.mark.unit
    def test_parse_args(self):
        args = parse_args(["unit", "--fast", "-k", "parser"])

        assert args.suite == "unit"
        assert args.fast is True
        assert args.keyword == "parser"
