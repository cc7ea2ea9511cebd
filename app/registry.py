"""City registry: coordinates, GPX filename tokens, flight-only and mountain sets,
and the station or airport each city is reached through.

The registry is an immutable value injected into the analyzer, the route
matcher and the planner. `DEFAULT_REGISTRY` holds the production roster.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional


@dataclass(frozen=True)
class CityCoordinates:
    """Latitude/longitude of a city centre in degrees."""
    lat: float
    lon: float


class TransportProvider(str, Enum):
    """How a city is reached from the hub city."""
    SUBURBAN_RAIL = "suburban_rail"
    FLIGHT = "flight"


@dataclass(frozen=True)
class TransportStop:
    """Where rides to and from a city start and end on public transport.

    `code` is the Yandex schedules id (`s` station or `c` settlement prefix) for
    suburban rail, or the IATA code for flights.
    """
    station: str
    provider: TransportProvider
    code: str
    hub_station: Optional[str] = None  # terminal used on the hub side
    airport: Optional[str] = None  # IATA code for flights from a rail-served city


@dataclass(frozen=True)
class CityRegistry:
    """Static configuration describing which cities exist and how they are treated."""
    coordinates: Mapping[str, CityCoordinates]
    filename_tokens: Mapping[str, str] = field(default_factory=dict)
    flight_cities: frozenset[str] = frozenset()
    mountain_cities: frozenset[str] = frozenset()
    transport: Mapping[str, TransportStop] = field(default_factory=dict)
    hub_city: Optional[str] = None

    def __post_init__(self):
        # freeze the mappings so a shared registry cannot be edited in place
        object.__setattr__(self, "coordinates", MappingProxyType(dict(self.coordinates)))
        object.__setattr__(self, "filename_tokens", MappingProxyType(dict(self.filename_tokens)))
        object.__setattr__(self, "flight_cities", frozenset(self.flight_cities))
        object.__setattr__(self, "mountain_cities", frozenset(self.mountain_cities))
        object.__setattr__(self, "transport", MappingProxyType(dict(self.transport)))

    @classmethod
    def build(
        cls,
        coordinates: Mapping[str, tuple[float, float]],
        *,
        filename_tokens: Mapping[str, str] | None = None,
        flight_cities: Iterable[str] = (),
        mountain_cities: Iterable[str] = (),
        transport: Mapping[str, TransportStop] | None = None,
        hub_city: Optional[str] = None,
    ) -> "CityRegistry":
        """Build a registry from plain `(lat, lon)` tuples."""
        return cls(
            coordinates={name: CityCoordinates(lat, lon) for name, (lat, lon) in coordinates.items()},
            filename_tokens=filename_tokens or {},
            flight_cities=frozenset(flight_cities),
            mountain_cities=frozenset(mountain_cities),
            transport=transport or {},
            hub_city=hub_city,
        )

    def city_names(self) -> list[str]:
        """Return the roster in alphabetical order."""
        return sorted(self.coordinates)

    def get(self, city: str) -> CityCoordinates | None:
        return self.coordinates.get(city)

    def __contains__(self, city: object) -> bool:
        return city in self.coordinates

    def filename_token(self, city: str) -> str:
        """Latin filename prefix for a city; unmapped cities use their own name."""
        return self.filename_tokens.get(city, city)

    def is_flight_city(self, city: str) -> bool:
        return city in self.flight_cities

    def is_mountain_city(self, city: str) -> bool:
        return city in self.mountain_cities

    def transport_stop(self, city: str) -> TransportStop | None:
        return self.transport.get(city)


DEFAULT_REGISTRY = CityRegistry.build(
    {
        "Москва": (55.75, 37.61),
        "Истра": (55.91, 36.85),
        "Кубинка": (55.59, 36.72),
        "Можайск": (55.50, 36.03),
        "Волоколамск": (56.04, 35.96),
        "Солнечногорск": (56.18, 36.98),
        "Завидово": (56.52, 36.52),
        "Дубна": (56.73, 37.16),
        "Яхрома": (56.29, 37.48),
        "Сергиев Посад": (56.30, 38.13),
        "Александров": (56.39, 38.71),
        "Павловский Посад": (55.78, 38.65),
        "Воскресенск": (55.32, 38.68),
        "Коломна": (55.08, 38.78),
        "Ступино": (54.89, 38.08),
        "Серпухов": (54.91, 37.41),
        "Калуга": (54.51, 36.26),
        "Обнинск": (55.11, 36.61),
        "Наро-Фоминск": (55.39, 36.73),
        "Жуковский": (55.60, 38.12),
        "Рязань": (54.62, 39.73),
        "Одинцово": (55.67, 37.28),
        "Зеленоград": (55.99, 37.21),
        "Подольск": (55.43, 37.55),
        "Тула": (54.19, 37.61),
        "Пушкино": (56.01, 37.85),
        "Кемер": (36.60, 30.56),
        "Звенигород": (55.73, 36.86),
    },
    filename_tokens={
        "Можайск": "Mozhaysk",
        "Жуковский": "Zhukovskyi",
        "Москва": "Moscow",
        "Истра": "Istra",
        "Кубинка": "Kubinka",
        "Волоколамск": "Volokolamsk",
        "Солнечногорск": "Solnechnogorsk",
        "Завидово": "Zavidovo",
        "Дубна": "Dubna",
        "Яхрома": "Yakhroma",
        "Сергиев Посад": "SergievPosad",
        "Александров": "Alexandrov",
        "Павловский Посад": "PavlovskyPosad",
        "Воскресенск": "Voskresensk",
        "Коломна": "Kolomna",
        "Ступино": "Stupino",
        "Серпухов": "Serpukhov",
        "Калуга": "Kaluga",
        "Обнинск": "Obninsk",
        "Наро-Фоминск": "NaroFominsk",
        "Рязань": "Ryazan",
        "Одинцово": "Odintsovo",
        "Зеленоград": "Zelenograd",
        "Подольск": "Podolsk",
        "Тула": "Tula",
        "Пушкино": "Pushkino",
        "Звенигород": "Zvenigorod",
        "Кемер": "Kemer",
    },
    flight_cities=["Кемер"],
    mountain_cities=["Кемер", "Фетхие"],
    transport={
        "Москва": TransportStop("Москва", TransportProvider.SUBURBAN_RAIL, "c213", airport="MOW"),
        "Александров": TransportStop("Александров-1", TransportProvider.SUBURBAN_RAIL, "s9601628", "Ярославский вокзал"),
        "Воскресенск": TransportStop("88 км", TransportProvider.SUBURBAN_RAIL, "s9601903", "Казанский вокзал"),
        "Коломна": TransportStop("Голутвин", TransportProvider.SUBURBAN_RAIL, "s9600716", "Казанский вокзал"),
        "Дубна": TransportStop("Большая Волга", TransportProvider.SUBURBAN_RAIL, "s9601720", "Савёловский вокзал"),
        "Павловский Посад": TransportStop(
            "Павловский Посад", TransportProvider.SUBURBAN_RAIL, "s9601872", "Курский вокзал"
        ),
        "Завидово": TransportStop("Новозавидовский", TransportProvider.SUBURBAN_RAIL, "c22478", "Ленинградский вокзал"),
        "Жуковский": TransportStop("Отдых", TransportProvider.SUBURBAN_RAIL, "c20571", "Казанский вокзал"),
        "Кемер": TransportStop("Анталья", TransportProvider.FLIGHT, "AYT", "Москва"),
        "Фетхие": TransportStop("Даламан", TransportProvider.FLIGHT, "DLM", "аэропорт"),
    },
    hub_city="Москва",
)
