import pytest

from panel_mediation import (
    ConfigurationError,
    MediationEstimator,
    ModelConfig,
    PanelSpec,
    is_panel,
    load_sample_data,
)
from panel_mediation.study import PanelMediationStudy


def test_study_runs_end_to_end(unbalanced_df):
    study = PanelMediationStudy(unbalanced_df, "x", ["m1", "m2"], "y", PanelSpec("id", "time"))
    res = study.run(run_comparison=True, model_list=["pooling", "within"], run_bootstrap=True, n_boot=5, seed=1)
    assert res.data.info["dropped_individuals"] == 1
    assert res.mediation.panel_info["n_individuals"] == 9
    assert list(res.comparison) == ["pooling", "within"]
    assert res.bootstrap.n_boot == 5
    assert res.conditional is None
    assert isinstance(study.estimator, MediationEstimator)


def test_unbalanced_study_bootstraps_the_estimated_sample(unbalanced_df):
    study = PanelMediationStudy(unbalanced_df, "x", ["m1", "m2"], "y", PanelSpec("id", "time", balance=False))
    res = study.run(run_bootstrap=True, n_boot=4, seed=2)
    assert res.mediation.panel_info["n_individuals"] == 10
    assert res.bootstrap.estimate == pytest.approx(res.mediation.effects())


def test_study_with_moderator_adds_conditional_effects(panel_df):
    study = PanelMediationStudy(
        panel_df, "x", "m1", "y", PanelSpec("id", "time"), moderator={"name": ["w"], "site": ["a"]}
    )
    res = study.run()
    assert res.conditional is not None
    assert set(res.conditional["effect"]) == {"indirect_m1", "direct_x", "total_x"}


def test_study_rejects_non_panel(panel_df):
    cross = panel_df.drop_duplicates("id")
    with pytest.raises(ConfigurationError):
        PanelMediationStudy(cross, "x", "m1", "y", PanelSpec("id", "time")).run()


def test_estimator_before_run():
    study = PanelMediationStudy(None, "x", "m1", "y", PanelSpec("id", "time"))
    with pytest.raises(RuntimeError):
        study.estimator


def test_study_validates_config_early(panel_df):
    with pytest.raises(ConfigurationError):
        PanelMediationStudy(panel_df, "x", "m1", "y", PanelSpec("id", "time"), ModelConfig(effect="both"))


def test_estimator_facade(panel_df):
    est = MediationEstimator(ModelConfig(panel_model="pooling"), "x", "m1", "y", "id", "time")
    res = est.estimate(panel_df)
    assert res.y_model.estimator == "PooledOLS"
    assert est.describe()["panel_model"] == "pooling"


def test_estimator_bootstrap_forwards_balance(unbalanced_df):
    est = MediationEstimator(ModelConfig(), "x", "m1", "y", "id", "time")
    res = est.estimate(unbalanced_df, balance=False)
    boot = est.bootstrap_ci(unbalanced_df, n_boot=3, seed=5, balance=False)
    assert boot.estimate == pytest.approx(res.effects())


def test_sample_data_is_a_panel():
    df = load_sample_data()
    assert len(df) == 220
    assert {"invest", "value", "capital", "firm", "year", "efficiency", "innovation"} <= set(df.columns)
    assert is_panel(df, "firm", "year")
    again = load_sample_data()
    assert df["efficiency"].equals(again["efficiency"])
