# service_api/main.py

from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from valve_lookup.config import build_config_from_env
from valve_lookup.errors import ValveLookupError
from valve_lookup.service import ValveLookupService

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

_service: Optional[ValveLookupService] = None


def get_service() -> ValveLookupService:
    """One process-wide service (and so one cache slot)."""
    global _service
    if _service is None:
        _service = ValveLookupService.from_workbook(build_config_from_env())
    return _service


@app.exception_handler(ValveLookupError)
async def lookup_error_handler(request: Request, exc: ValveLookupError):
    return JSONResponse(status_code=500, content=exc.to_record())


@app.get("/")
def root():
    return {"service": "valve-lookup-api", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/valves")
def list_valves(
    lot: Optional[str] = None,
    zone: Optional[str] = None,
    service: ValveLookupService = Depends(get_service),
):
    # lot wins over zone when both are given
    if lot:
        return {"lot": lot, "zones": service.get_zones_for_lot(lot)}
    if zone:
        return {"zone": zone, "lots": service.get_lots_for_zone(zone)}
    return service.get_all_valves().to_record()


@app.get("/valves/{valve_id}")
def get_valve(valve_id: str, service: ValveLookupService = Depends(get_service)):
    valve = service.get_valve_by_id(valve_id)
    if valve is None:
        raise HTTPException(status_code=404, detail="Valve not found")
    stale = service.get_all_valves().stale
    return {"stale": stale, "valve": valve.to_record()}


@app.get("/search")
def search(
    q: List[str] = Query(default=[]),
    service: ValveLookupService = Depends(get_service),
):
    terms = [t.strip() for t in q if t and t.strip()]
    if not terms:
        raise HTTPException(status_code=400, detail="Missing search term (q)")

    result, report = service.shutoff_report(terms)
    return {"result": result.to_record(), "shutoff": report.to_record()}
