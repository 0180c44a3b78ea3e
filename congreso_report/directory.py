from __future__ import annotations

from typing import Dict, List, Optional

import pandas as pd

from congreso_report.filters import CodeInClause, Code, PresentClause, apply_clauses, normalize_code


class DepartmentDirectory:
    """Department code -> display name, looked up by normalized code."""

    def __init__(self, frame: pd.DataFrame) -> None:
        self._frame = frame

    def list_all(self) -> List[Dict[str, Optional[str]]]:
        df = self._frame
        if df.empty:
            return []
        df = df.dropna(subset=["department_code"]).sort_values(["department_code", "name"], kind="mergesort")
        df = df.drop_duplicates(subset=["department_code"], keep="first")
        return [
            {"codigo_departamento": str(r.department_code), "nombre": (str(r.name) if pd.notna(r.name) else None)}
            for r in df.itertuples(index=False)
        ]

    def name_by_code(self) -> Dict[str, str]:
        names: Dict[str, str] = {}
        for row in self.list_all():
            if row["nombre"] is None:
                continue
            names.setdefault(normalize_code(row["codigo_departamento"] or ""), row["nombre"])
        return names

    @staticmethod
    def display_name(code: Code, names: Dict[str, str]) -> str:
        return names.get(normalize_code(code), str(code))


class MunicipalityDirectory:
    def __init__(self, frame: pd.DataFrame) -> None:
        self._frame = frame

    def list_by_department(self, department_code: Optional[Code]) -> List[Dict[str, str]]:
        code = str(department_code).strip() if department_code is not None else ""
        if not code or self._frame.empty:
            return []
        df = apply_clauses(self._frame, [CodeInClause("department_code", [code]), PresentClause("municipality_code")])
        df = df.sort_values(["name", "municipality_code"], kind="mergesort", na_position="last")
        out: List[Dict[str, str]] = []
        for r in df.itertuples(index=False):
            item = {"codigo_divipola": str(r.municipality_code)}
            if pd.notna(r.name):
                item["nombre"] = str(r.name).strip()
            out.append(item)
        return out
