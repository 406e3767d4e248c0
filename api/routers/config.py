"""Config endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from api.config_store import ConfigStore, get_config_store
from api.models import ConfigResponse
from infra.planning.config import NetworkConfig

router = APIRouter(prefix="/api/v1/networks", tags=["Config"])


@router.post("/{slug}/environments/{environment}/config", response_model=ConfigResponse)
async def save_config(
    slug: str,
    environment: str,
    config: NetworkConfig,
    store: ConfigStore = Depends(get_config_store),
) -> ConfigResponse:
    """Save network configuration."""
    store.save(slug, environment, config)

    return ConfigResponse(
        slug=slug,
        environment=environment,
        message="Configuration saved",
        config=config,
    )


@router.get("/{slug}/environments/{environment}/config", response_model=ConfigResponse)
async def get_config(
    slug: str,
    environment: str,
    store: ConfigStore = Depends(get_config_store),
) -> ConfigResponse:
    """Get network configuration."""
    config = store.get(slug, environment)
    if not config:
        raise HTTPException(
            status_code=404,
            detail=f"Config for {slug}/{environment} not found",
        )

    return ConfigResponse(
        slug=slug,
        environment=environment,
        message="Configuration retrieved",
        config=config,
    )


@router.delete("/{slug}/environments/{environment}/config", response_model=ConfigResponse)
async def delete_config(
    slug: str,
    environment: str,
    store: ConfigStore = Depends(get_config_store),
) -> ConfigResponse:
    """Delete network configuration."""
    if not store.delete(slug, environment):
        raise HTTPException(
            status_code=404,
            detail=f"Config for {slug}/{environment} not found",
        )

    return ConfigResponse(
        slug=slug,
        environment=environment,
        message="Configuration deleted",
    )
