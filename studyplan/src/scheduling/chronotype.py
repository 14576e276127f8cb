from studyplan.extensions import create_logger

logger = create_logger(__name__, level="DEBUG")

MORNING = "morning"
BALANCED = "balanced"
NIGHT = "night"

DEFAULT_CHRONOTYPE = BALANCED

# Hour of day (24h clock) at which a fresh day of planning begins
CHRONOTYPE_START_HOURS = {
    MORNING: 8,
    BALANCED: 10,
    NIGHT: 12,
}


class ChronotypePolicy:
    """Maps a self-reported energy profile to a preferred earliest start hour."""

    def __init__(self, chronotype=None):
        normalized = str(chronotype or DEFAULT_CHRONOTYPE).strip().lower()
        if normalized not in CHRONOTYPE_START_HOURS:
            logger.debug(
                f"Unknown chronotype {chronotype!r}, using {DEFAULT_CHRONOTYPE}"
            )
            normalized = DEFAULT_CHRONOTYPE
        self.chronotype = normalized

    @property
    def preferred_start_hour(self):
        return CHRONOTYPE_START_HOURS[self.chronotype]

    def __repr__(self):
        return f"<ChronotypePolicy {self.chronotype}: {self.preferred_start_hour}:00>"


def preferred_start_hour(chronotype=None):
    return ChronotypePolicy(chronotype).preferred_start_hour
