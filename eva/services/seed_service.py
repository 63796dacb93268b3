"""
Fixture data for a fresh marketplace: categories, UK cities and culture tags

Records are created through the admin API; slugs that already exist are skipped.
"""

import logging

from .marketplace_client import MarketplaceClient, items_of

logger = logging.getLogger(__name__)

_UNSPLASH = "https://images.unsplash.com/photo-{}?w=800&h=600&fit=crop"

SEED_CATEGORIES = [
    {"name": "Venues", "slug": "venues", "description": "Beautiful spaces for your event",
     "icon": "Building2", "coverImage": _UNSPLASH.format("1519167758481-83f550bb49b3")},
    {"name": "Photographers", "slug": "photographers", "description": "Capture your precious moments",
     "icon": "Camera", "coverImage": _UNSPLASH.format("1606800052052-a08af7148866")},
    {"name": "Caterers", "slug": "caterers", "description": "Delicious food for every palate",
     "icon": "Utensils", "coverImage": _UNSPLASH.format("1555244162-803834f70033")},
    {"name": "Music & DJs", "slug": "music-djs", "description": "Set the perfect mood", "icon": "Music"},
    {"name": "Florists", "slug": "florists", "description": "Fresh blooms for your celebration", "icon": "Flower2"},
    {"name": "Event Planners", "slug": "event-planners", "description": "Expert coordination & planning",
     "icon": "Users"},
    {"name": "Bakers", "slug": "bakers", "description": "Custom cakes & desserts", "icon": "Cake"},
    {"name": "Decorators", "slug": "decorators", "description": "Transform your venue", "icon": "Sparkles"},
    {"name": "Makeup Artists", "slug": "makeup-artists", "description": "Look your absolute best",
     "icon": "Palette"},
]

# (name, county, region, latitude, longitude)
_CITY_ROWS = [
    ("London", "Greater London", "London", 51.5074, -0.1278),
    ("Birmingham", "West Midlands", "West Midlands", 52.4862, -1.8904),
    ("Manchester", "Greater Manchester", "North West", 53.4808, -2.2426),
    ("Leeds", "West Yorkshire", "Yorkshire and the Humber", 53.8008, -1.5491),
    ("Bristol", "Bristol", "South West", 51.4545, -2.5879),
    ("Nottingham", "Nottinghamshire", "East Midlands", 52.9548, -1.1581),
    ("Sheffield", "South Yorkshire", "Yorkshire and the Humber", 53.3811, -1.4701),
    ("Leicester", "Leicestershire", "East Midlands", 52.6369, -1.1398),
    ("Coventry", "West Midlands", "West Midlands", 52.4068, -1.5197),
    ("Luton", "Bedfordshire", "East of England", 51.8787, -0.4175),
    ("Milton Keynes", "Buckinghamshire", "South East", 52.0406, -0.7594),
    ("Reading", "Berkshire", "South East", 51.4543, -0.9781),
    ("Brighton", "East Sussex", "South East", 50.8225, -0.1372),
    ("Oxford", "Oxfordshire", "South East", 51.7520, -1.2577),
    ("Cambridge", "Cambridgeshire", "East of England", 52.2053, 0.1218),
    ("Liverpool", "Merseyside", "North West", 53.4084, -2.9916),
    ("Newcastle upon Tyne", "Tyne and Wear", "North East", 54.9783, -1.6178),
    ("Cardiff", "South Glamorgan", "Wales", 51.4816, -3.1791),
    ("Edinburgh", "City of Edinburgh", "Scotland", 55.9533, -3.1883),
    ("Glasgow", "City of Glasgow", "Scotland", 55.8642, -4.2518),
]


def _city(order: int, row: tuple) -> dict:
    name, county, region, latitude, longitude = row
    return {
        "name": name,
        "slug": name.lower().replace(" ", "-"),
        "country": "UK",
        "county": county,
        "region": region,
        "latitude": latitude,
        "longitude": longitude,
        "isFeatured": True,
        "displayOrder": order,
        "metaTitle": f"Event Vendors & Services in {name} | EVA Marketplace",
        "metaDescription": (
            f"Find top-rated event vendors in {name}. Compare venues, photographers, caterers, "
            f"and more. Trusted professionals for your perfect event in {name}."
        ),
    }


SEED_CITIES = [_city(i, row) for i, row in enumerate(_CITY_ROWS, start=1)]

SEED_CULTURE_TAGS = [
    {"name": name, "slug": slug, "displayOrder": i}
    for i, (slug, name) in enumerate(
        [
            ("nigerian", "Nigerian"),
            ("ghanaian", "Ghanaian"),
            ("jamaican", "Jamaican"),
            ("indian", "Indian"),
            ("pakistani", "Pakistani"),
            ("caribbean", "Caribbean"),
            ("african", "African"),
            ("asian", "Asian"),
            ("western", "Western/Traditional"),
            ("multicultural", "Multicultural"),
        ]
    )
]

# kind -> (list path, create path, response key, fixtures)
SEED_PLAN = {
    "categories": ("/api/categories", "/api/categories", "categories", SEED_CATEGORIES),
    "cities": ("/api/cities", "/api/cities", "cities", SEED_CITIES),
    "culture_tags": ("/api/admin/tags", "/api/admin/tags", "tags", SEED_CULTURE_TAGS),
}


async def _seed_kind(marketplace: MarketplaceClient, kind: str) -> dict:
    list_path, create_path, key, fixtures = SEED_PLAN[kind]
    existing = {row.get("slug") for row in items_of(await marketplace.get(list_path), key)}

    created = 0
    for record in fixtures:
        if record["slug"] in existing:
            logger.debug(f"⏭️ {kind}: {record['slug']} already exists")
            continue
        await marketplace.post(create_path, json=record)
        existing.add(record["slug"])
        created += 1

    skipped = len(fixtures) - created
    logger.info(f"🌱 Seeded {kind}: {created} created, {skipped} skipped")
    return {"created": created, "skipped": skipped}


async def seed_marketplace(marketplace: MarketplaceClient) -> dict:
    """Create every missing fixture record; returns per-kind counts"""
    return {kind: await _seed_kind(marketplace, kind) for kind in SEED_PLAN}
