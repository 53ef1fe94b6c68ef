import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd
import pytest


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def three_rows():
    # (event, fatalities, injuries, propdmg, cropdmg)
    return pd.DataFrame(
        {
            "EVTYPE": ["A", "B", "A"],
            "FATALITIES": [1, 3, 0],
            "INJURIES": [2, 0, 1],
            "PROPDMG": [10.0, 0.0, 0.0],
            "CROPDMG": [0.0, 5.0, 0.0],
        }
    )


@pytest.fixture
def storm_csv(tmp_path):
    """A small bzip2 CSV shaped like the NOAA export, with blanks and extra columns."""
    import bz2

    path = tmp_path / "cache" / "StormData.csv.bz2"
    path.parent.mkdir()
    text = (
        'STATE__,BGN_DATE,EVTYPE,FATALITIES,INJURIES,PROPDMG,PROPDMGEXP,CROPDMG,REMARKS\n'
        '1,4/18/1950 0:00:00,TORNADO,2,10,25,K,0,NA\n'
        '1,4/18/1951 0:00:00,TORNADO,0,5,2.5,M,,\n'
        '2,6/1/2011 0:00:00,HAIL,0,0,,,4,"hail, large"\n'
        '2,6/2/2011 0:00:00,,1,,0,,0,\n'
    )
    with bz2.open(path, "wt") as f:
        f.write(text)
    return path
