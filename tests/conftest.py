import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest


def make_panel(n_ind: int = 10, n_time: int = 20, seed: int = 42) -> pd.DataFrame:
    """Balanced panel with known paths: a1 = 0.3, a2 = 0.5, b1 = 0.6, b2 = 0.2, c' = 0.4."""
    rng = np.random.default_rng(seed)
    rows = []
    for i in range(n_ind):
        alpha = rng.normal(0.0, 1.0)
        for t in range(n_time):
            x = rng.normal(0.0, 1.0) + 0.5 * alpha
            w = rng.normal(0.0, 1.0)
            m1 = 0.3 * x + alpha + rng.normal(0.0, 0.5)
            m2 = 0.5 * x - alpha + rng.normal(0.0, 0.5)
            y = 0.4 * x + 0.6 * m1 + 0.2 * m2 + 2.0 * alpha + rng.normal(0.0, 0.5)
            rows.append(
                {"id": f"i{i:02d}", "time": 2000 + t, "x": x, "m1": m1, "m2": m2, "y": y, "w": w}
            )
    return pd.DataFrame(rows)


@pytest.fixture
def panel_df() -> pd.DataFrame:
    return make_panel()


@pytest.fixture
def unbalanced_df(panel_df) -> pd.DataFrame:
    # i03 misses its last two periods
    drop = (panel_df["id"] == "i03") & (panel_df["time"] >= 2018)
    return panel_df.loc[~drop].reset_index(drop=True)


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")
