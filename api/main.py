"""FastAPI application for the network planner."""

from fastapi import FastAPI

from api.routers import config, plans
from api.settings import settings
from infra.logging import configure_logging

configure_logging(json_format=settings.log_json, log_level=settings.log_level)

app = FastAPI(
    title="Network Planner API",
    description="Plans VPC subnet allocation, NAT placement and routing across availability zones",
    version="1.0.0",
)

app.include_router(config.router)
app.include_router(plans.router)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
