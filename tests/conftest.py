import pandas as pd
import pytest

from congreso_report.data import ReportData

VOTE_HEADERS = ["anio_eleccion", "corporacion", "codigo_departamento", "codigo_divipole", "partido", "votos"]


def votes_frame(rows):
    return pd.DataFrame(rows, columns=VOTE_HEADERS)


@pytest.fixture
def departments():
    return pd.DataFrame(
        {
            "codigo_departamento": ["05", "11", "76"],
            "nombre": ["Antioquia", "Bogotá D.C.", "Valle del Cauca"],
        }
    )


@pytest.fixture
def votes():
    return votes_frame(
        [
            (2014, "Senado", "76", "76001", "Partido D", 10),
            (2018, "Senado", "05", "05001", "Partido A", 100),
            (2018, "Senado", "5", "5001", "Partido B", 150),
            (2022, "Senado", "05", "05001", "Partido A", 300),
            (2022, "Senado", "05", "05002", "Partido B", 50),
            (2022, "Senado", "11", "11001", "Partido B", 70),
            (2022, "Senado", "05", "05001", None, 999),
            (2022, "Senado", "05", "05001", "   ", 500),
            (2022, "Camara", "11", "11001", "Partido C", 200),
            (2022, "Camara", "011", "11001", "Partido A", 40),
        ]
    )


@pytest.fixture
def teradata():
    return pd.DataFrame(
        [
            ("05", "Educación", "Cobertura neta", 10.0, 2023),
            ("5", "Educación", "Cobertura neta", 20.0, 2023),
            ("05", None, "Tasa de homicidios", 30.0, 2023),
            ("11", "Seguridad y convivencia ciudadana", "Tasa de homicidios", 12.0, 2023),
            ("11", None, "Ind sin dim", 5.0, 2023),
            ("05", "Educación", "Cobertura neta", 1000.0, 2020),
            ("05", "Educación", "  ", 7.0, 2023),
        ],
        columns=["codigo_departamento", "dimension", "indicador", "dato_numerico", "anio"],
    )


@pytest.fixture
def dane():
    return pd.DataFrame(
        [
            ("05", "Poblacion total", 2023, 6800000.0),
            ("11", "Poblacion total", 2023, 7900000.0),
            ("11", "Hogares", 2023, 2700000.0),
        ],
        columns=["codigo_departamento", "variable", "anio", "total"],
    )


@pytest.fixture
def municipalities():
    return pd.DataFrame(
        {
            "codigo_divipole": ["05002", "05001", "11001", ""],
            "des_municipio": ["Abejorral", "Medellín", "Bogotá", "Sin código"],
            "codigo_departamento": ["05", "5", "11", "05"],
        }
    )


@pytest.fixture
def report_data(votes, teradata, dane, departments, municipalities):
    return ReportData.from_frames(
        votes=votes,
        teradata=teradata,
        dane=dane,
        departments=departments,
        municipalities=municipalities,
    )


@pytest.fixture
def make_votes():
    return votes_frame
