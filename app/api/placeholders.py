from fastapi import APIRouter

from app.schemas.common import PlaceholderResponse

router = APIRouter()

PLACEHOLDER_RESOURCES = {
    "/marketplace": "Marketplace",
    "/professionals": "Professional",
    "/reference-data": "Reference data",
    "/rough-stones": "Rough stone",
}


def _placeholder(resource: str):
    async def not_implemented() -> PlaceholderResponse:
        return PlaceholderResponse(message=f"{resource} routes are not implemented yet")

    return not_implemented


for path, resource in PLACEHOLDER_RESOURCES.items():
    router.add_api_route(
        path,
        _placeholder(resource),
        methods=["GET"],
        response_model=PlaceholderResponse,
        name=f"{resource.lower().replace(' ', '_')}_placeholder",
    )
