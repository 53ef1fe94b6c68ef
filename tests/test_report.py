import tempfile

import docx
import pandas as pd
import pytest

from stormimpact import report
from stormimpact.aggregate import economic_impact, population_impact
from stormimpact.config import PipelineConfig


def _ticks(fig):
    fig.canvas.draw()
    return [t.get_text() for t in fig.axes[0].get_xticklabels()]


@pytest.fixture
def economic():
    # already ranked; not alphabetical on purpose
    return pd.DataFrame(
        {
            "EVTYPE": ["TORNADO", "FLOOD", "HAIL"],
            "PROPDMG": [90.0, 40.0, 30.0],
            "CROPDMG": [10.0, 10.0, 0.0],
            "TOTALDMG": [100.0, 50.0, 30.0],
        }
    )


@pytest.fixture
def population():
    return pd.DataFrame(
        {
            "EVTYPE": ["TORNADO", "HEAT", "FLOOD"],
            "FATALITIES": [5633, 937, 470],
            "INJURIES": [91346, 2100, 6789],
        }
    )


def test_format_top_lists_first_rows_in_rank_order(economic):
    text = report.format_top(economic, 2, "Damage")

    lines = text.splitlines()
    assert lines[0] == "Damage"
    assert "TORNADO" in lines[3] and "FLOOD" in lines[4]
    assert "HAIL" not in text
    assert "100.00" in text


def test_population_chart_is_grouped_and_log_scaled(population):
    fig = report.plot_population_impact(population, 2)
    ax = fig.axes[0]

    assert ax.get_yscale() == "log"
    assert _ticks(fig) == ["TORNADO", "HEAT"]
    assert len(ax.containers) == 2
    assert [p.get_height() for p in ax.containers[0]] == [5633, 937]
    assert [p.get_height() for p in ax.containers[1]] == [91346, 2100]
    assert [t.get_text() for t in ax.get_legend().get_texts()] == ["Fatalities", "Injuries"]


def test_population_chart_linear_axis(population):
    fig = report.plot_population_impact(population, 3, log_y=False)

    assert fig.axes[0].get_yscale() == "linear"


def test_damage_chart_keeps_rank_order(economic):
    fig = report.plot_economic_damage(economic, 3)
    ax = fig.axes[0]

    assert _ticks(fig) == ["TORNADO", "FLOOD", "HAIL"]
    assert [p.get_height() for p in ax.patches] == [100.0, 50.0, 30.0]


def test_share_chart_divides_by_whole_table(economic):
    fig = report.plot_economic_share(economic, 2)
    heights = [p.get_height() for p in fig.axes[0].patches]

    assert _ticks(fig) == ["TORNADO", "FLOOD"]
    assert heights == pytest.approx([100 / 180 * 100, 50 / 180 * 100])


def test_missing_event_type_gets_label():
    table = pd.DataFrame({"EVTYPE": ["HAIL", None], "TOTALDMG": [2.0, 1.0]})

    fig = report.plot_economic_damage(table, 2)

    assert _ticks(fig) == ["HAIL", "(missing)"]


def test_build_and_save_figures(tmp_path, population, economic):
    cfg = PipelineConfig(top_n_health=2, top_n_economic_absolute=2, top_n_economic_percent=3)
    figures = report.build_figures(population, economic, cfg)

    paths = report.save_figures(figures, str(tmp_path / "charts"))

    assert list(figures) == ["population_impact", "economic_damage", "economic_share"]
    assert [p.rsplit("/", 1)[-1] for p in paths] == [
        "population_impact.png",
        "economic_damage.png",
        "economic_share.png",
    ]
    assert all((tmp_path / "charts" / name).stat().st_size > 0 for name in
               ("population_impact.png", "economic_damage.png", "economic_share.png"))


def test_year_range(storm_csv):
    from stormimpact.loader import load_storm_data

    assert report._year_range(load_storm_data(storm_csv)) == (1950, 2011)
    assert report._year_range(pd.DataFrame({"EVTYPE": ["A"]})) is None


def test_generate_docx_report(tmp_path, storm_csv, monkeypatch):
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(scratch))
    from stormimpact.loader import load_storm_data

    raw = load_storm_data(storm_csv)
    out = tmp_path / "out" / "report.docx"

    written = report.generate_docx_report(
        raw, population_impact(raw), economic_impact(raw), str(out),
        config=report.ReportConfig(pipeline=PipelineConfig(top_n_health=2)),
    )

    assert written == str(out)
    document = docx.Document(str(out))
    text = "\n".join(p.text for p in document.paragraphs)
    assert len(document.inline_shapes) == 3
    # chart scratch files are gone
    assert list(scratch.iterdir()) == []
    assert "Year range (begin date): 1950 to 2011" in text
    assert "Top 2 event types by fatalities" in text
    assert "Dropped on merge: 0 (population tables), 0 (economic tables)." in text
