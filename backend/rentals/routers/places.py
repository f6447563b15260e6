# backend/rentals/routers/places.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ..auth import Principal, get_principal
from ..clients.google_places import GooglePlacesClient, PlacesError, get_places_client

router = APIRouter(prefix="/places", tags=["places"])


def _require_key(client: GooglePlacesClient) -> None:
    if not client.enabled():
        raise HTTPException(status_code=500, detail="Google Maps API key not configured")


@router.get("/autocomplete")
def autocomplete(
    input: str | None = Query(default=None),
    country: str = Query(default="es"),
    client: GooglePlacesClient = Depends(get_places_client),
    p: Principal = Depends(get_principal),
):
    if not input or len(input) < 3:
        raise HTTPException(status_code=400, detail="Input must be at least 3 characters")
    _require_key(client)

    try:
        return client.autocomplete(input=input, country=country or "es")
    except PlacesError as e:
        raise HTTPException(status_code=500, detail=f"Google Places request failed: {e}")


@router.get("/details")
def details(
    place_id: str | None = Query(default=None),
    client: GooglePlacesClient = Depends(get_places_client),
    p: Principal = Depends(get_principal),
):
    if not place_id:
        raise HTTPException(status_code=400, detail="place_id is required")
    _require_key(client)

    try:
        return client.details(place_id=place_id)
    except PlacesError as e:
        raise HTTPException(status_code=500, detail=f"Google Places request failed: {e}")
