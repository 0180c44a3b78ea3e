from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

IndicatorFeed = Literal["teradata", "dane"]


class ScopeParamsModel(BaseModel):
    """Raw scope parameters; loose values are normalized later (bad years become "no filter")."""

    model_config = ConfigDict(populate_by_name=True)

    year: Optional[Union[int, str]] = None
    corporation: Optional[str] = None
    department: Optional[Union[int, str]] = None
    municipality: Optional[Union[int, str]] = None
    exclude_party: Optional[str] = Field(default=None, alias="excludeParty")


class DepartmentsParamsModel(BaseModel):
    year: Optional[Union[int, str]] = None
    corporation: Optional[str] = None
    departments: Union[str, List[Union[int, str]], None] = Field(default_factory=list)


class SummaryParamsModel(DepartmentsParamsModel):
    pass


class IndicatorParamsModel(DepartmentsParamsModel):
    feed: IndicatorFeed = "teradata"


class MunicipalityOptionModel(BaseModel):
    codigo_divipola: str
    nombre: Optional[str] = None


class DepartmentModel(BaseModel):
    codigo_departamento: str
    nombre: Optional[str] = None
