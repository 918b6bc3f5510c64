"""
Park catalog: ThemeParks.wiki entity ids and land keyword maps.

Land is guessed from the attraction name (first keyword hit wins); anything unmatched is "Other".
"""
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Park:
    key: str
    entity_id: str
    name: str
    land_map: dict[str, str] = field(default_factory=dict)


DISNEYLAND_LAND_MAP = {
    "mainstreet": "Main Street U.S.A.",
    "adventureland": "Adventureland",
    "frontierland": "Frontierland",
    "fantasyland": "Fantasyland",
    "tomorrowland": "Tomorrowland",
    "neworleanssquare": "New Orleans Square",
    "crittercountry": "Critter Country",
    "mickeystoontown": "Mickey's Toontown",
    "starwars": "Star Wars: Galaxy's Edge",
}

DCA_LAND_MAP = {
    "buenavista": "Buena Vista Street",
    "hollywoodland": "Hollywood Land",
    "avengers": "Avengers Campus",
    "carsland": "Cars Land",
    "grizzlypeak": "Grizzly Peak",
    "pixarpier": "Pixar Pier",
    "paradisegardens": "Paradise Gardens",
}

OTHER_LAND = "Other"

PARKS: dict[str, Park] = {
    "disneyland": Park(
        key="disneyland",
        entity_id="7340550b-c14d-4def-80bb-acdb51d49a66",
        name="Disneyland Park",
        land_map=DISNEYLAND_LAND_MAP,
    ),
    "californiaadventure": Park(
        key="californiaadventure",
        entity_id="832fcd51-ea19-4e77-85c7-75d5843b127c",
        name="Disney California Adventure",
        land_map=DCA_LAND_MAP,
    ),
}


def get_park(key: str) -> Park | None:
    return PARKS.get(key)


def land_for(park: Park, ride_name: str | None) -> str:
    """Match a land keyword against the ride name with spaces and punctuation removed."""
    if not ride_name:
        return OTHER_LAND
    squashed = "".join(ch for ch in ride_name.lower() if ch.isalnum())
    for keyword, land in park.land_map.items():
        if keyword in squashed:
            return land
    return OTHER_LAND
