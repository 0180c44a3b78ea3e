from congreso_report.data import ReportData
from congreso_report.filters import ScopeFilter
from congreso_report.metrics_elections import (
    compute_elections_summary,
    list_corporations,
    list_feed_years,
    list_parties,
)


def test_elections_summary_per_year_and_body(report_data):
    out = compute_elections_summary(report_data)
    assert [s["year"] for s in out["summaries"]] == [2022, 2018, 2014]
    assert out["summaries"][0]["corporations"] == [
        {"corporacion": "Camara", "totalVotos": 240, "partidoGanador": "Partido C", "votosPartidoGanador": 200},
        {"corporacion": "Senado", "totalVotos": 420, "partidoGanador": "Partido A", "votosPartidoGanador": 300},
    ]
    assert out["summaries"][1]["corporations"] == [
        {"corporacion": "Senado", "totalVotos": 250, "partidoGanador": "Partido B", "votosPartidoGanador": 150},
    ]


def test_elections_summary_empty():
    assert compute_elections_summary(ReportData.from_frames()) == {"summaries": []}


def test_catalogs(report_data):
    assert list_corporations(report_data.votes) == ["Camara", "Senado"]
    assert list_feed_years(report_data.teradata) == [2020, 2023]
    assert list_feed_years(report_data.dane) == [2023]


def test_parties_ignore_exclusion(report_data):
    scope = ScopeFilter(year=2022, election_body="Senado", excluded_party="Partido A")
    assert list_parties(scope, report_data.votes) == ["Partido A", "Partido B"]
    assert list_parties(ScopeFilter(department_code="11"), report_data.votes) == ["Partido A", "Partido B", "Partido C"]


def test_bodies_without_party_rows_are_left_out(make_votes):
    data = ReportData.from_frames(
        votes=make_votes(
            [
                (2022, "Senado", "05", "05001", "Partido A", 10),
                (2022, "Camara", "05", "05001", "  ", 99),
                (2022, "Camara", "05", "05001", None, 5),
            ]
        )
    )
    out = compute_elections_summary(data)
    assert out["summaries"] == [
        {
            "year": 2022,
            "corporations": [
                {"corporacion": "Senado", "totalVotos": 10, "partidoGanador": "Partido A", "votosPartidoGanador": 10}
            ],
        }
    ]
