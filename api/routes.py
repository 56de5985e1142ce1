from fastapi import APIRouter, Depends, HTTPException, Request

from api.schemas import HealthResponse, SchemaStatusResponse
from schema.introspector.service import schema_status
from storage.context import AppContext

router = APIRouter()


def get_context(request: Request) -> AppContext:
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(status_code=503, detail="Storage is not initialized")
    return context


@router.get("/health", response_model=HealthResponse)
def health(context: AppContext = Depends(get_context)) -> HealthResponse:
    adapter = context.adapter
    return HealthResponse(
        status="ok" if adapter.is_open else "closed",
        driver=adapter.driver.name,
        database=adapter.db_name,
        engine_open=adapter.is_open,
    )


@router.get("/schema", response_model=SchemaStatusResponse)
def schema(context: AppContext = Depends(get_context)) -> SchemaStatusResponse:
    return SchemaStatusResponse(**schema_status(context.engine, context.schemas))
