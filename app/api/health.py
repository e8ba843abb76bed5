from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy", "service": "courtbook"}


@router.get("/")
async def root() -> dict[str, str | dict[str, str]]:
    return {
        "service": "CourtBook - Tennis Court Reservations",
        "version": "0.1.0",
        "endpoints": {
            "health": "/health",
            "open_courts": "/api/v1/open-courts",
            "reserve_court": "/api/v1/reserve-court",
        },
    }
