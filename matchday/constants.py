"""Constants shared across the competition engine."""

# Competition types
LEAGUE = 'league'
TOURNAMENT = 'tournament'
FRIENDLY = 'friendly'
COMPETITION_TYPES = (LEAGUE, TOURNAMENT, FRIENDLY)

# Competition / round statuses
UPCOMING = 'upcoming'
ACTIVE = 'active'
COMPLETED = 'completed'

# Match statuses
SCHEDULED = 'scheduled'
LIVE = 'live'
# A match reuses COMPLETED

# League formats
SINGLE = 'single'
DOUBLE = 'double'

# Friendly formats
BEST_OF = 'best_of'
FIRST_TO = 'first_to'

KNOCKOUT = 'knockout'

# Result letters used in a player's form
WIN = 'W'
DRAW = 'D'
LOSS = 'L'

POINTS_FOR_WIN = 3
POINTS_FOR_DRAW = 1

# Error kinds carried by EngineError
VALIDATION_ERROR = 'validation'
STATE_ERROR = 'state'
NOT_FOUND_ERROR = 'not_found'

# Named rounds, counted back from the final
ROUND_NAMES_FROM_FINAL = {
    0: 'Final',
    1: 'Semi-Final',
    2: 'Quarter-Final',
}
