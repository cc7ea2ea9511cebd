"""Ticket search links for getting to a route's start and home from its finish.

Suburban rail trips link to the Yandex schedules search, trips involving a
flight city link to an Aviasales search. Links are plain strings built from
the registry's transport table; a city without a stop gets no link.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional
from urllib.parse import quote, urlencode

from app.registry import CityRegistry, TransportProvider, TransportStop
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="transport")

YANDEX_SUBURBAN_URL = "https://rasp.yandex.ru/search/suburban/"
AVIASALES_SEARCH_URL = "https://www.aviasales.ru/search/"


def _flight_code(stop: TransportStop) -> Optional[str]:
    return stop.code if stop.provider is TransportProvider.FLIGHT else stop.airport


def transport_link(origin: TransportStop, destination: TransportStop, date: dt.date) -> Optional[str]:
    """Search link for one trip on `date`, or None when a code is missing."""
    if TransportProvider.FLIGHT in (origin.provider, destination.provider):
        from_code, to_code = _flight_code(origin), _flight_code(destination)
        if not from_code or not to_code:
            return None
        # one adult passenger
        return f"{AVIASALES_SEARCH_URL}{from_code}{date:%d%m}{to_code}1"

    params = {
        "fromId": origin.code,
        "fromName": origin.station,
        "toId": destination.code,
        "toName": destination.station,
        "when": f"{date:%d.%m.%Y}",
    }
    return f"{YANDEX_SUBURBAN_URL}?{urlencode(params, quote_via=quote)}"


def city_link(registry: CityRegistry, from_city: str, to_city: str, date: dt.date) -> Optional[str]:
    """Link between two registry cities; None when either has no stop."""
    origin, destination = registry.transport_stop(from_city), registry.transport_stop(to_city)
    if origin is None or destination is None:
        logger.debug("No transport stop", extra={"from_city": from_city, "to_city": to_city})
        return None
    return transport_link(origin, destination, date)


def travel_links(
    registry: CityRegistry,
    start_city: Optional[str],
    end_city: Optional[str],
    date: dt.date,
) -> tuple[Optional[str], Optional[str]]:
    """Links from the hub to the route start and from the route finish back.

    A leg that starts or ends in the hub city itself needs no ticket.
    """
    hub = registry.hub_city
    if hub is None:
        return None, None
    outbound = city_link(registry, hub, start_city, date) if start_city and start_city != hub else None
    inbound = city_link(registry, end_city, hub, date) if end_city and end_city != hub else None
    return outbound, inbound
