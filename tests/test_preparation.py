import pandas as pd
import pytest

from panel_mediation import ConfigurationError, PanelSpec
from panel_mediation.helpers.preparation import (
    PanelData,
    add_lags,
    is_panel,
    panel_structure,
    prepare_panel_data,
)


# ----------------------------
# is_panel / panel_structure
# ----------------------------
def test_is_panel_true_for_repeated_observations(panel_df):
    assert is_panel(panel_df, "id", "time") is True


def test_is_panel_false_for_cross_section(panel_df):
    cross = panel_df.drop_duplicates("id")
    assert is_panel(cross, "id", "time") is False


@pytest.mark.parametrize("id_col,time_col", [("nope", "time"), ("id", "nope"), (None, "time"), ("id", "")])
def test_is_panel_false_for_missing_columns(panel_df, id_col, time_col):
    assert is_panel(panel_df, id_col, time_col) is False


def test_is_panel_passes_repeated_ids_without_time_dimension():
    # known weakness of the heuristic: any constant "time" column passes
    df = pd.DataFrame({"id": [1, 1, 2, 2], "time": [0, 0, 0, 0]})
    assert is_panel(df, "id", "time") is True


def test_panel_structure_counts(panel_df, unbalanced_df):
    s = panel_structure(panel_df, "id", "time")
    assert s == {"is_panel": True, "n_individuals": 10, "n_time_periods": 20, "n_obs": 200, "balanced": True}
    assert panel_structure(unbalanced_df, "id", "time")["balanced"] is False
    assert panel_structure(panel_df, "id", "missing")["is_panel"] is False


# ----------------------------
# prepare_panel_data
# ----------------------------
def test_prepare_indexes_and_sorts(panel_df):
    shuffled = panel_df.sample(frac=1.0, random_state=0)
    out = prepare_panel_data(shuffled, "id", "time")
    assert list(out.index.names) == ["id", "time"]
    assert out.index.is_monotonic_increasing
    assert len(out) == 200
    assert "id" not in out.columns


def test_prepare_does_not_mutate_input(panel_df):
    before = panel_df.copy()
    prepare_panel_data(panel_df, "id", "time")
    pd.testing.assert_frame_equal(panel_df, before)


def test_prepare_is_idempotent_on_balanced_panel(panel_df):
    once = prepare_panel_data(panel_df, "id", "time")
    twice = prepare_panel_data(once.reset_index(), "id", "time")
    pd.testing.assert_frame_equal(once, twice)


def test_prepare_rejects_duplicate_pairs(panel_df):
    dup = pd.concat([panel_df, panel_df.iloc[[0]]], ignore_index=True)
    with pytest.raises(ConfigurationError) as err:
        prepare_panel_data(dup, "id", "time")
    assert err.value.field == "index"
    assert "i00" in str(err.value)


def test_prepare_missing_column(panel_df):
    with pytest.raises(ConfigurationError) as err:
        prepare_panel_data(panel_df, "firm", "time")
    assert err.value.field == "id_col"


def test_prepare_balances_shared_individuals(unbalanced_df, capsys):
    out = prepare_panel_data(unbalanced_df, "id", "time")
    assert "i03" not in out.index.get_level_values(0)
    assert out.index.get_level_values(0).nunique() == 9
    assert "Dropped 1 individuals" in capsys.readouterr().out


def test_prepare_without_balancing_keeps_everyone(unbalanced_df):
    out = prepare_panel_data(unbalanced_df, "id", "time", balance=False)
    assert out.index.get_level_values(0).nunique() == 10
    assert len(out) == len(unbalanced_df)


def test_prepare_raises_when_no_individual_survives():
    df = pd.DataFrame({"id": [1, 2], "time": [1, 2], "v": [0.0, 1.0]})
    with pytest.raises(ConfigurationError):
        prepare_panel_data(df, "id", "time")


# ----------------------------
# add_lags / PanelData
# ----------------------------
def test_add_lags_within_individual(panel_df):
    panel = prepare_panel_data(panel_df, "id", "time")
    out, names = add_lags(panel, ["x"], 1)
    assert names == ["lag1_x"]
    first = out.xs("i00", level="id")
    assert pd.isna(first["lag1_x"].iloc[0])
    assert first["lag1_x"].iloc[1] == pytest.approx(first["x"].iloc[0])
    # no leakage across individuals
    second = out.xs("i01", level="id")
    assert pd.isna(second["lag1_x"].iloc[0])


def test_add_lags_gap_in_years_gives_nan():
    df = pd.DataFrame({"id": [1, 1, 1], "time": [2000, 2001, 2003], "x": [1.0, 2.0, 3.0]})
    panel = prepare_panel_data(df, "id", "time", balance=False)
    out, _ = add_lags(panel, ["x"], 1)
    assert out.loc[(1, 2001), "lag1_x"] == pytest.approx(1.0)
    assert pd.isna(out.loc[(1, 2003), "lag1_x"])


def test_add_lags_shared_gap_survives_balancing():
    df = pd.DataFrame(
        {
            "id": ["a"] * 3 + ["b"] * 3,
            "time": [2000, 2001, 2003] * 2,
            "x": [1.0, 2.0, 3.0, 10.0, 20.0, 30.0],
        }
    )
    panel = prepare_panel_data(df, "id", "time")
    out, _ = add_lags(panel, ["x"], 2)
    assert out.loc[("a", 2003), "lag2_x"] == pytest.approx(2.0)
    assert out.loc[("b", 2003), "lag2_x"] == pytest.approx(20.0)
    assert out["lag2_x"].isna().sum() == 4


def test_add_lags_missing_period_for_one_individual(unbalanced_df):
    # i05 skips 2010 only
    df = unbalanced_df.loc[~((unbalanced_df["id"] == "i05") & (unbalanced_df["time"] == 2010))]
    panel = prepare_panel_data(df, "id", "time", balance=False)
    out, _ = add_lags(panel, ["x"], 1)
    assert pd.isna(out.loc[("i05", 2011), "lag1_x"])
    assert out.loc[("i06", 2011), "lag1_x"] == pytest.approx(out.loc[("i06", 2010), "x"])


def test_add_lags_string_periods_step_by_position():
    df = pd.DataFrame(
        {"id": [1, 1, 2, 2], "time": ["2020Q1", "2020Q2", "2020Q1", "2020Q2"], "x": [1.0, 2.0, 3.0, 4.0]}
    )
    panel = prepare_panel_data(df, "id", "time")
    out, _ = add_lags(panel, ["x"], 1)
    assert out.loc[(2, "2020Q2"), "lag1_x"] == pytest.approx(3.0)
    assert pd.isna(out.loc[(1, "2020Q1"), "lag1_x"])


def test_add_lags_zero_is_noop(panel_df):
    panel = prepare_panel_data(panel_df, "id", "time")
    out, names = add_lags(panel, ["x"], 0)
    assert names == []
    assert out is panel


def test_panel_data_info(unbalanced_df):
    pdata = PanelData(unbalanced_df, PanelSpec("id", "time"))
    assert pdata.info["n_individuals"] == 9
    assert pdata.info["n_time_periods"] == 20
    assert pdata.info["n_obs"] == 180
    assert pdata.info["dropped_individuals"] == 1
    assert {"id", "time"} <= set(pdata.flat().columns)
