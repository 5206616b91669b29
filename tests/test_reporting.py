import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from panel_mediation import ModelConfig, compare_models, comparison_table, conditional_effects, estimate_mediation
from panel_mediation.reporting import (
    FigFinalizer,
    PlotTheme,
    effects_frame,
    format_detailed,
    format_result,
    plot_conditional_effects,
    plot_effects_bar,
    plot_model_comparison,
    plot_residuals_vs_fitted,
    print_result,
    residuals_frame,
    write_processed_data,
    write_report,
)
from panel_mediation.helpers.preparation import prepare_panel_data


@pytest.fixture
def result(panel_df):
    return estimate_mediation("x", ["m1", "m2"], "y", "id", "time", panel_df)


def test_format_result_lists_metadata_and_effects(result):
    text = format_result(result)
    assert "Model type: within" in text
    assert "Number of individuals: 10" in text
    assert "Number of time periods: 20" in text
    assert "Total observations: 200" in text
    assert f"- indirect_m1: {result.indirect_effects['indirect_m1']:.4f}" in text
    assert f"- direct_x: {result.direct_effects['direct_x']:.4f}" in text
    assert f"- total_x: {result.total_effects['total_x']:.4f}" in text
    assert "Lag periods" not in text


def test_lag_line_only_with_lags(panel_df):
    res = estimate_mediation("x", "m1", "y", "id", "time", panel_df, ModelConfig(lag=2))
    assert "- Lag periods: 2" in format_result(res)


def test_str_delegates(result, capsys):
    assert str(result) == format_result(result)
    capsys.readouterr()
    print_result(result)
    assert capsys.readouterr().out.strip() == format_result(result).strip()


def test_detailed_rendering(result):
    text = format_detailed(result)
    assert text.count("Model a") == 2
    assert "Step 2: X + M -> Y relationship" in text
    assert "Total Effects Model (X -> Y)" in text
    assert "SE: robust (HC1)" in text
    assert "EntityEffects" in text


def test_detailed_uses_conventional_without_robust(panel_df):
    res = estimate_mediation("x", "m1", "y", "id", "time", panel_df, ModelConfig(robust_se=False))
    assert "SE: conventional" in format_detailed(res)


def test_coef_table_uses_robust_covariance(result):
    tab = result.y_model.coef_table()
    se = np.sqrt(np.diag(result.y_model.robust_cov.to_numpy()))
    np.testing.assert_allclose(tab["std_error"].to_numpy(), se)
    assert ((tab["p_value"] >= 0) & (tab["p_value"] <= 1)).all()
    assert tab.loc["x", "estimate"] == result.direct_effects["direct_x"]


def test_effects_frame(result):
    frame = effects_frame(result)
    assert list(frame.columns) == ["effect", "value", "type"]
    assert frame["type"].tolist() == ["indirect", "indirect", "direct", "total"]
    assert frame["effect"].tolist() == ["indirect_m1", "indirect_m2", "direct_x", "total_x"]


def test_residuals_frame(result):
    frame = residuals_frame(result)
    assert list(frame.columns) == ["fitted", "residual"]
    assert len(frame) == result.y_model.nobs


def test_write_report(result, tmp_path):
    path = write_report(result, tmp_path / "report.txt")
    text = path.read_text(encoding="utf-8")
    assert "ANALYSIS SETTINGS" in text
    assert "M (mediators): m1, m2" in text
    assert "Detailed Model Results" in text


def test_write_processed_data(panel_df, tmp_path):
    panel = prepare_panel_data(panel_df, "id", "time")
    path = write_processed_data(panel, tmp_path / "processed.csv")
    back = pd.read_csv(path)
    assert list(back.columns[:2]) == ["id", "time"]
    assert len(back) == 200


# ----------------------------
# Plots
# ----------------------------
def test_plot_effects_bar(result, tmp_path):
    fig, ax, info = plot_effects_bar(effects_frame(result), show=False, save=str(tmp_path / "e.png"))
    assert info["n"] == 4
    assert len(ax.patches) == 4
    assert ax.get_title() == "Mediation effects"
    assert (tmp_path / "e.png").exists()


def test_plot_residuals(result):
    fig, ax, info = plot_residuals_vs_fitted(residuals_frame(result), show=False, title="Residuals")
    assert info["n"] == result.y_model.nobs
    assert ax.get_title() == "Residuals"


def test_plot_model_comparison(panel_df):
    table = comparison_table(compare_models("x", ["m1", "m2"], "y", "id", "time", panel_df, ["pooling", "within"]))
    fig, ax, info = plot_model_comparison(table, show=False)
    assert info["models"] == ["pooling", "within"]
    assert len(ax.patches) == 4


def test_plot_conditional_effects(panel_df):
    res = estimate_mediation("x", "m1", "y", "id", "time", panel_df, moderator={"name": ["w"]})
    fig, ax, info = plot_conditional_effects(conditional_effects(res, "w"), show=False)
    assert info["effects"] == ["indirect_m1", "direct_x", "total_x"]
    assert len(ax.get_lines()) >= 3


def test_custom_theme_on_given_axes(tmp_path):
    fig_ = FigFinalizer(PlotTheme(zero_line=False, palette=["#000000"]), show_default=False)

    @fig_(title="Preset", ylabel="Effect")
    def draw(values, ax, palette):
        ax.plot(values, color=palette[0], label="line")
        return {"n": len(values)}

    _, outer = plt.subplots()
    fig, ax, info = draw([1.0, 2.0, 3.0], ax=outer, ylabel="Override", save=str(tmp_path / "x.png"))
    assert ax is outer
    assert info == {"n": 3}
    assert ax.get_title() == "Preset"
    assert ax.get_ylabel() == "Override"
    assert len(ax.get_lines()) == 1
    assert ax.get_legend() is not None
    # given axes belong to the caller: nothing saved
    assert not (tmp_path / "x.png").exists()
