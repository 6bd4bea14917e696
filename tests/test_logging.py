"""Tests for component progress logging."""

from doctopictree import DensityClusterer, HierarchyBuilder, VectorSpaceBuilder


def test_log_routes_to_logger():
    messages = []
    for component in (
        VectorSpaceBuilder(logger=messages.append),
        DensityClusterer(logger=messages.append),
        HierarchyBuilder(logger=messages.append),
    ):
        component._log("hello")
        component._log("hidden", verbose=False)
    assert messages == ["hello", "hello", "hello"]


def test_log_falls_back_to_print(capsys):
    VectorSpaceBuilder()._log("[VectorSpaceBuilder] ready")
    assert capsys.readouterr().out == "[VectorSpaceBuilder] ready\n"
