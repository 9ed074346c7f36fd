"""Constants shared by the standings engine, stores and CLI."""

# Tiebreaker scopes (stored alongside the scope key)
SCOPE_WEEKLY = 'weekly'
SCOPE_YEARLY = 'yearly'
VALID_SCOPES = (SCOPE_WEEKLY, SCOPE_YEARLY)

# Tiebreak resolution methods
METHOD_CHANCE = 'chance'
VALID_METHODS = (METHOD_CHANCE,)

# Year race defaults
DEFAULT_RACE_TOP_N = 5

# League defaults (overridden by data/league_config.json)
DEFAULT_TIMEZONE = 'America/Chicago'

# Monday=0 ... Friday=4 (datetime.weekday())
WEEKDAYS = frozenset(range(5))
