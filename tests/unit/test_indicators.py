import pytest

from congreso_report.directory import DepartmentDirectory
from congreso_report.filters import ScopeFilter
from congreso_report.metrics_indicators import (
    build_groups,
    compute_indicator_series,
    short_label,
    slugify,
)


def _names(data):
    return DepartmentDirectory(data.departments).name_by_code()


def test_slugify_is_url_safe():
    assert slugify("Seguridad y convivencia ciudadana") == "seguridad-y-convivencia-ciudadana"
    assert slugify("Educación (2023)") == "educacion-2023"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Educación", "Educación"),
        ("Seguridad y convivencia ciudadana", "Seguridad y convivenc…"),
        ("Salud pública y bienestar social", "Salud pública y"),
    ],
)
def test_short_label(value, expected):
    assert short_label(value) == expected


def test_repeated_measurements_are_averaged(report_data):
    scope = ScopeFilter(year=2023, department_codes=["05", "11"])
    out = compute_indicator_series(scope, report_data.teradata, names=_names(report_data))

    assert out["labels"] == ["Cobertura neta", "Ind sin dim", "Tasa de homicidios"]
    assert out["series"] == [
        {"department": "Antioquia", "codigo_departamento": "05", "data": [15.0, 0.0, 30.0]},
        {"department": "Bogotá D.C.", "codigo_departamento": "11", "data": [0.0, 5.0, 12.0]},
    ]


def test_groups_follow_first_dimension_seen(report_data):
    scope = ScopeFilter(year=2023, department_codes=["05", "11"])
    out = compute_indicator_series(scope, report_data.teradata, names=_names(report_data))

    assert out["groups"] == [
        {"id": "educacion", "label": "Educación", "fullLabel": "Educación", "indicatorIndices": [0]},
        {"id": "otros", "label": "Otros", "fullLabel": "Otros", "indicatorIndices": [1]},
        {
            "id": "seguridad-y-convivencia-ciudadana",
            "label": "Seguridad y convivenc…",
            "fullLabel": "Seguridad y convivencia ciudadana",
            "indicatorIndices": [2],
        },
    ]


def test_dane_feed_lands_in_default_group(report_data):
    scope = ScopeFilter(year=2023, department_codes=["05", "11"])
    out = compute_indicator_series(scope, report_data.dane, names=_names(report_data))

    assert out["labels"] == ["Hogares", "Poblacion total"]
    assert out["series"][0]["data"] == [0.0, 6800000.0]
    assert out["series"][1]["data"] == [2700000.0, 7900000.0]
    assert out["groups"] == [{"id": "otros", "label": "Otros", "fullLabel": "Otros", "indicatorIndices": [0, 1]}]


def test_without_year_every_year_is_averaged(report_data):
    scope = ScopeFilter(department_codes=["05"])
    out = compute_indicator_series(scope, report_data.teradata, names=_names(report_data))
    cobertura = out["labels"].index("Cobertura neta")
    assert out["series"][0]["data"][cobertura] == pytest.approx((10.0 + 20.0 + 1000.0) / 3)


def test_empty_inputs(report_data):
    empty = {"groups": [], "labels": [], "series": []}
    assert compute_indicator_series(ScopeFilter(), report_data.teradata, names={}) == empty
    assert compute_indicator_series(ScopeFilter(year=1990, department_codes=["05"]), report_data.teradata, names={}) == empty


def test_build_groups_drops_nothing_and_sorts_by_label():
    groups = build_groups(["a", "b", "c"], {"a": "Zeta", "c": "alfa"}, default="Otros")
    assert [g["label"] for g in groups] == ["alfa", "Otros", "Zeta"]
    assert [g["indicatorIndices"] for g in groups] == [[2], [1], [0]]


def test_accented_labels_sort_with_their_base_letter():
    groups = build_groups(
        ["a", "b", "c", "d"],
        {"a": "Salud", "b": "Ética pública", "c": "Economía", "d": "Zonas rurales"},
    )
    assert [g["label"] for g in groups] == ["Economía", "Ética pública", "Salud", "Zonas rurales"]
