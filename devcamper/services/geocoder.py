from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from devcamper.core.config import Settings

logger = logging.getLogger("devcamper.geocoder")

MAPQUEST_URL = "https://www.mapquestapi.com/geocoding/v1/address"


class GeocodingError(Exception):
    pass


@dataclass
class GeoLocation:
    latitude: float
    longitude: float
    formatted_address: str | None = None
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zipcode: str | None = None
    country: str | None = None


class Geocoder(Protocol):
    def geocode(self, query: str) -> list[GeoLocation]:
        ...


def _formatted_address(street: str, city: str, state: str, zipcode: str, country: str) -> str:
    region = " ".join(part for part in (state, zipcode) if part)
    return ", ".join(part for part in (street, city, region, country) if part)


def _parse_mapquest_location(raw: dict[str, Any]) -> GeoLocation | None:
    lat_lng = raw.get("latLng") or raw.get("displayLatLng") or {}
    try:
        latitude = float(lat_lng["lat"])
        longitude = float(lat_lng["lng"])
    except (KeyError, TypeError, ValueError):
        return None
    street = str(raw.get("street") or "").strip()
    city = str(raw.get("adminArea5") or "").strip()
    state = str(raw.get("adminArea3") or "").strip()
    zipcode = str(raw.get("postalCode") or "").strip()
    country = str(raw.get("adminArea1") or "").strip()
    return GeoLocation(
        latitude=latitude,
        longitude=longitude,
        formatted_address=_formatted_address(street, city, state, zipcode, country) or None,
        street=street or None,
        city=city or None,
        state=state or None,
        zipcode=zipcode or None,
        country=country or None,
    )


class MapQuestGeocoder:
    def __init__(self, api_key: str, timeout: float = 10.0, transport: httpx.BaseTransport | None = None):
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    def geocode(self, query: str) -> list[GeoLocation]:
        if not self.api_key:
            raise GeocodingError("GEOCODER_API_KEY is not set")
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.get(MAPQUEST_URL, params={"key": self.api_key, "location": query})
        except httpx.HTTPError as exc:
            raise GeocodingError(f"Geocoder request failed: {exc}") from exc
        if response.status_code >= 400:
            raise GeocodingError(f"Geocoder error: HTTP {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise GeocodingError("Geocoder returned invalid JSON") from exc

        info = payload.get("info") or {}
        if int(info.get("statuscode") or 0) != 0:
            messages = "; ".join(str(m) for m in info.get("messages") or []) or "unknown error"
            raise GeocodingError(f"Geocoder error: {messages}")

        locations: list[GeoLocation] = []
        for result in payload.get("results") or []:
            for raw in result.get("locations") or []:
                parsed = _parse_mapquest_location(raw)
                if parsed is not None:
                    locations.append(parsed)
        return locations


class DummyGeocoder:
    """Resolves every query to a fixed point; for local development."""

    def __init__(self, latitude: float = 42.3601, longitude: float = -71.0589):
        self.latitude = latitude
        self.longitude = longitude

    def geocode(self, query: str) -> list[GeoLocation]:
        logger.warning("[GEOCODER MOCK] query=%s -> lat=%s lng=%s", query, self.latitude, self.longitude)
        return [
            GeoLocation(
                latitude=self.latitude,
                longitude=self.longitude,
                formatted_address=str(query or "").strip() or None,
            )
        ]


def build_geocoder(settings: Settings) -> Geocoder:
    provider = str(settings.GEOCODER_PROVIDER or "dummy").strip().lower()
    if provider in {"", "dummy", "mock"}:
        return DummyGeocoder()
    if provider == "mapquest":
        return MapQuestGeocoder(settings.GEOCODER_API_KEY, timeout=settings.GEOCODER_TIMEOUT_SECONDS)
    raise GeocodingError(f"Unknown GEOCODER_PROVIDER: {provider}")
