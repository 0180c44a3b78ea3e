import pandas as pd
import pytest

from congreso_report.data import (
    ReportData,
    find_table,
    load_report_data,
    prepare_votes,
    read_table,
)
from congreso_report.errors import DataSourceError


def _write_votes_csv(path):
    path.write_text(
        "ANIO_ELECCION,CORPORACION,CODIGO_DEPARTAMENTO,CODIGO_DIVIPOLA,PARTIDO,VOTOS\n"
        "2022,Senado,05,05001,Partido A,120\n"
        "2022,Senado,05,05001,Partido B,abc\n"
        "2022, Senado ,11,11001,Partido C,-4\n",
        encoding="utf-8",
    )


def test_csv_load_keeps_padded_codes(tmp_path):
    _write_votes_csv(tmp_path / "congreso_resultados.csv")
    data = load_report_data(tmp_path)

    votes = data.votes
    assert data.files == ("congreso_resultados.csv",)
    assert votes["department_code"].tolist() == ["05", "05", "11"]
    assert votes["municipality_code"].tolist() == ["05001", "05001", "11001"]
    assert votes["election_body"].tolist() == ["Senado", "Senado", "Senado"]
    # Unparseable and negative votes become 0.
    assert votes["votes"].tolist() == [120, 0, 0]
    assert votes["year"].tolist() == [2022, 2022, 2022]
    assert data.teradata.empty


def test_xlsx_is_preferred_over_csv(tmp_path):
    pd.DataFrame({"codigo_departamento": ["05"], "nombre": ["Antioquia"]}).to_excel(
        tmp_path / "divi_departamentos.xlsx", index=False
    )
    (tmp_path / "divi_departamentos.csv").write_text("codigo_departamento,nombre\n11,Bogotá\n", encoding="utf-8")

    assert find_table(tmp_path, "divi_departamentos").suffix == ".xlsx"
    data = load_report_data(tmp_path)
    assert data.departments["name"].tolist() == ["Antioquia"]


def test_missing_directory_raises(tmp_path):
    with pytest.raises(DataSourceError):
        load_report_data(tmp_path / "nope")


def test_empty_directory_gives_empty_tables(tmp_path):
    data = load_report_data(tmp_path)
    assert data.votes.empty
    assert "votes" in data.votes.columns


def test_unreadable_table_raises(tmp_path):
    (tmp_path / "congreso_resultados.xlsx").write_bytes(b"not a workbook")
    with pytest.raises(DataSourceError):
        load_report_data(tmp_path)
    with pytest.raises(DataSourceError):
        read_table(tmp_path / "congreso_resultados.json")


def test_prepare_votes_adds_missing_columns():
    out = prepare_votes(pd.DataFrame({"votos": [3], "partido": [" A "]}))
    assert out["party"].tolist() == ["A"]
    assert out["votes"].tolist() == [3]
    assert {"year", "election_body", "department_code", "municipality_code"} <= set(out.columns)


def test_kpi_feed_lookup():
    data = ReportData.from_frames()
    assert "indicator" in data.kpi_feed("dane").columns
    assert "dimension" in data.kpi_feed("dane").columns
    with pytest.raises(ValueError):
        data.kpi_feed("bogus")
