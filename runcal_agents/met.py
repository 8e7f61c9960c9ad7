# Compendium-style running METs keyed by the exclusive upper speed bound (km/h)
MET_TABLE = (
    (6.4, 6.0),
    (8.0, 8.3),
    (9.7, 9.8),
    (11.3, 11.0),
    (12.9, 11.8),
    (14.5, 12.8),
    (16.1, 14.5),
)
MET_TOP = 16.0


def resolve_met(speed_kmh: float) -> float:
    for upper, met in MET_TABLE:
        if speed_kmh < upper:
            return met
    return MET_TOP
