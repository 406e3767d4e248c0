"""Planning endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from api.config_store import ConfigStore, get_config_store
from api.database import Database, get_db
from api.models import KeyRenameRecordEntry, MigrationLogResponse, PlanResponse
from api.services.planning import planning_service
from infra.planning.config import NetworkConfig
from infra.planning.errors import PlanningError

router = APIRouter(prefix="/api/v1", tags=["Plans"])


@router.post("/plans", response_model=PlanResponse)
async def create_plan(config: NetworkConfig) -> PlanResponse:
    """Plan a network from an inline configuration. Nothing is recorded."""
    try:
        return planning_service.plan(config)
    except PlanningError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())


@router.post("/networks/{slug}/environments/{environment}/plan", response_model=PlanResponse)
async def plan_saved_network(
    slug: str,
    environment: str,
    store: ConfigStore = Depends(get_config_store),
    database: Database = Depends(get_db),
) -> PlanResponse:
    """Plan the saved configuration and record identity key changes."""
    config = store.get(slug, environment)
    if not config:
        raise HTTPException(
            status_code=404,
            detail=f"Config for {slug}/{environment} not found",
        )

    try:
        return planning_service.plan_and_record(f"{slug}-{environment}", config, database)
    except PlanningError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())


@router.get(
    "/networks/{slug}/environments/{environment}/migrations",
    response_model=MigrationLogResponse,
)
async def list_migrations(
    slug: str,
    environment: str,
    database: Database = Depends(get_db),
) -> MigrationLogResponse:
    """List identity key renames recorded for a network."""
    network = f"{slug}-{environment}"
    return MigrationLogResponse(
        network=network,
        renames=[
            KeyRenameRecordEntry.model_validate(record)
            for record in database.list_rename_records(network)
        ],
    )
