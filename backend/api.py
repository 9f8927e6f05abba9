import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)

from .db.seed import build_demo_store
from .db.store import PropertyStore
from .exceptions import StoreError, describe_invalid_body
from .models.payloads import MilestoneCreate, MilestoneUpdate, PhaseCreate, PropertyCreate, UnitCreate, UnitUpdate
from .models.property import Phase, Unit
from .utils.coerce import to_bool
from .utils.logging import get_logger

LOGGER = get_logger("api")

router = APIRouter(prefix="/api")
properties = APIRouter(prefix="/properties")


def get_store(request: Request) -> PropertyStore:
    return request.app.state.store


def _data(payload: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"data": jsonable_encoder(payload, by_alias=True)})


def _unit_result(property_id: str, phase: Phase, unit: Unit) -> Dict[str, Any]:
    return {"propertyId": property_id, "phaseId": phase.id, "unit": unit}


@router.get("/health")
def health():
    return {"status": "ok"}


@properties.get("")
@properties.get("/", include_in_schema=False)
def list_properties(store: PropertyStore = Depends(get_store)):
    return _data(store.list_properties())


@properties.post("")
@properties.post("/", include_in_schema=False)
def create_property(body: Optional[PropertyCreate] = None, store: PropertyStore = Depends(get_store)):
    return _data(store.add_property(body or PropertyCreate()), status_code=201)


@properties.get("/{property_id}")
def get_property(property_id: str, store: PropertyStore = Depends(get_store)):
    return _data(store.get_property(property_id))


@properties.delete("/{property_id}")
def delete_property(property_id: str, store: PropertyStore = Depends(get_store)):
    store.delete_property(property_id)
    return Response(status_code=204)


@properties.post("/{property_id}/phases")
def create_phase(property_id: str, body: Optional[PhaseCreate] = None, store: PropertyStore = Depends(get_store)):
    phase = store.create_phase(property_id, (body or PhaseCreate()).name)
    return _data({"phase": phase}, status_code=201)


@properties.post("/{property_id}/units")
def add_unit(property_id: str, body: Optional[UnitCreate] = None, store: PropertyStore = Depends(get_store)):
    phase, unit = store.add_unit(property_id, body or UnitCreate())
    return _data({"propertyId": property_id, "phase": phase, "unit": unit}, status_code=201)


@properties.get("/{property_id}/units/{unit_id}")
def get_unit(property_id: str, unit_id: str, store: PropertyStore = Depends(get_store)):
    prop, phase, unit = store.get_unit(property_id, unit_id)
    return _data(
        {
            "property": {"id": prop.id, "name": prop.name, "type": prop.type},
            "phase": {"id": phase.id, "name": phase.name},
            "unit": unit,
        }
    )


@properties.patch("/{property_id}/units/{unit_id}")
def update_unit(property_id: str, unit_id: str, body: Optional[UnitUpdate] = None, store: PropertyStore = Depends(get_store)):
    phase, unit = store.update_unit(property_id, unit_id, body or UnitUpdate())
    return _data(_unit_result(property_id, phase, unit))


@properties.delete("/{property_id}/units/{unit_id}")
def delete_unit(property_id: str, unit_id: str, store: PropertyStore = Depends(get_store)):
    phase, unit = store.delete_unit(property_id, unit_id)
    return _data(_unit_result(property_id, phase, unit))


@properties.post("/{property_id}/units/{unit_id}/milestones")
def add_milestone(property_id: str, unit_id: str, body: Optional[MilestoneCreate] = None, store: PropertyStore = Depends(get_store)):
    phase, unit = store.add_milestone(property_id, unit_id, body or MilestoneCreate())
    return _data(_unit_result(property_id, phase, unit), status_code=201)


@properties.patch("/{property_id}/units/{unit_id}/milestones")
def update_milestone(property_id: str, unit_id: str, body: Optional[MilestoneUpdate] = None, store: PropertyStore = Depends(get_store)):
    phase, unit = store.update_milestone(property_id, unit_id, body or MilestoneUpdate())
    return _data(_unit_result(property_id, phase, unit))


router.include_router(properties)


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    LOGGER.info("request_rejected path=%s status=%d error=%r", request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = describe_invalid_body(exc.errors())
    LOGGER.info("request_malformed path=%s error=%r", request.url.path, message)
    return JSONResponse(status_code=400, content={"error": message})


def create_app(store: Optional[PropertyStore] = None) -> FastAPI:
    """Build an API bound to its own store; each app gets an isolated tree."""

    app = FastAPI(title="Property Sales Tracker API")
    app.state.store = store if store is not None else PropertyStore()
    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(router)
    return app


def _default_store() -> PropertyStore:
    if to_bool(os.getenv("SEED_DEMO_DATA", "true")):
        return build_demo_store()
    return PropertyStore()


app = create_app(_default_store())


def main() -> None:  # pragma: no cover - manual entry point
    import uvicorn

    port = int(os.getenv("PORT", "4000"))
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":  # pragma: no cover
    main()
