from typing import List

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str
    driver: str
    database: str
    engine_open: bool


class TableStatus(BaseModel):
    table_name: str
    present: bool
    columns: List[str] = Field(default_factory=list)
    missing_columns: List[str] = Field(default_factory=list)


class SchemaStatusResponse(BaseModel):
    tables: List[TableStatus]
    missing_tables: List[str]
