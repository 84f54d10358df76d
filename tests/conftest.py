import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
import matplotlib.pyplot as plt

from analysis_reports.simulation.factory_grid import FactoryParams


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def small_factory():
    # short horizon and a fast-failing line keep the sweeps quick
    return FactoryParams(num_operating=3, spares=1, repairmen=1, mean_life=5.0,
                         mean_repair=1.0, horizon=50.0, spare_cost=100.0,
                         repairman_cost=250.0, budget=600.0)


@pytest.fixture
def rentals():
    rng = np.random.default_rng(0)
    n = 80
    hoods = rng.choice(["Downtown", "Annex", "Leslieville", "Junction"], size=n)
    offset = {"Downtown": 1500, "Annex": 900, "Leslieville": 400, "Junction": 0}
    beds = rng.integers(1, 4, size=n)
    baths = rng.integers(1, 3, size=n)
    price = (900 + 450 * beds + 200 * baths + np.array([offset[h] for h in hoods])
             + rng.normal(0, 60, size=n))
    return pd.DataFrame({
        "Neighbourhood": [f" {h} " for h in hoods],
        "Bedrooms": beds,
        "Bathrooms": baths,
        "Price": [f"${p:,.0f}" for p in price],
    })


@pytest.fixture
def players():
    return pd.DataFrame({
        "Player": ["Ann", "Bo", "Cy", "Di", "Ed", "Flo", "Gus", "Hal"],
        "Team": ["Reds", "Reds", "Blues", "Blues", "Greens", "Greens", "Reds", "Blues"],
        "Games": [10, 8, 12, 0, 9, 11, 10, 7],
        "Points": [200, 96, 180, 0, 90, 275, 140, 49],
        "Rebounds": [50, 40, 96, 0, 27, 44, 80, 21],
        "Assists": [30, 16, 24, 0, 45, 55, 20, 14],
    })
