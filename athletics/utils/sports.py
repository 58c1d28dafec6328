"""
Sports offered by the athletics department
"""

SPORTS = [
    "Football",
    "Boys Basketball",
    "Girls Basketball",
    "Volleyball",
    "Boys Hockey",
    "Girls Ice Hockey",
]


def unknown_sports(sports: list) -> list:
    """Return the entries that are not a recognised sport, in input order"""
    return [sport for sport in sports if sport not in SPORTS]


def normalize_sports(sports: list) -> list:
    """Drop duplicates while keeping the order the fan picked them in"""
    seen = set()
    result = []
    for sport in sports:
        if sport not in seen:
            seen.add(sport)
            result.append(sport)
    return result
