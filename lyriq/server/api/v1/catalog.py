"""
Catalog Endpoints.

Exposes the static option lists the dashboard offers when configuring AI
agents and workflows. Ids outside these lists are rejected on write.
"""

from typing import Any, Dict, List

from fastapi import APIRouter

from lyriq.core.models.domain.catalog import CATALOGS

router = APIRouter()


@router.get(
    "",
    summary="Get Catalogs",
    description="Voice providers, tools, end-of-call actions, knowledge collections, integrations, "
    "trigger sources, workflow actions and post-call actions.",
    response_description="Mapping of catalog name to its items.",
)
async def get_catalogs() -> Dict[str, List[Dict[str, Any]]]:
    """
    Get every static catalog.

    Each voice provider lists the voices it offers; other items carry an id, a
    display name and an optional description.
    """
    return {name: [item.model_dump() for item in items] for name, items in CATALOGS.items()}
