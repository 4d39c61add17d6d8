"""
SlipStats - Constants

Game constants, enums and lookup tables for Super Smash Bros. Melee replays
recorded with Slippi.
"""

from enum import Enum, IntEnum, StrEnum

# Melee runs at 60 frames per second
FRAMES_PER_SECOND = 60

# Stock count assumed for a player with no stock records in a match.
# Standard competitive ruleset starts every player on 4 stocks.
DEFAULT_STARTING_STOCKS = 4

# Sentinel returned when a tag matches neither slot
UNRESOLVED_INDEX = -1

# Sentinel returned when a match has no decisive winner
NO_WINNER = -1

# Punish damage tiers (percent dealt during the punish)
PUNISH_MEDIUM_THRESHOLD = 35.0
PUNISH_HIGH_THRESHOLD = 70.0

# Number of punishes shown in rankings
TOP_PUNISH_DISPLAY_COUNT = 20


class Slot(IntEnum):
    """
    Match-local player slot for a singles (1v1) match.

    Every aggregation in this package assumes exactly two players; the
    opponent of a slot is the other slot.
    """

    FIRST = 0
    SECOND = 1

    @property
    def opponent(self) -> "Slot":
        return Slot.SECOND if self is Slot.FIRST else Slot.FIRST


class Perspective(StrEnum):
    """Whose character a usage breakdown is built from."""

    SELF = "self"
    OPPONENT = "opponent"


class OpeningType(StrEnum):
    """How a punish sequence began."""

    COUNTER_ATTACK = "counter-attack"
    NEUTRAL_WIN = "neutral-win"
    TRADE = "trade"
    UNKNOWN = "unknown"  # Unrecognised value in the replay export


class PunishSeverity(str, Enum):
    """Damage tier of a punish."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


OPENING_TYPE_LABELS: dict[OpeningType, str] = {
    OpeningType.COUNTER_ATTACK: "Counter Hit",
    OpeningType.NEUTRAL_WIN: "Neutral",
    OpeningType.TRADE: "Trade",
    OpeningType.UNKNOWN: "Unknown",
}

# Display colors for punish severity tiers
SEVERITY_COLORS: dict[PunishSeverity, str] = {
    PunishSeverity.LOW: "green",
    PunishSeverity.MEDIUM: "yellow",
    PunishSeverity.HIGH: "red",
}

# Internal stage ids as written by Slippi
STAGE_NAMES: dict[int, str] = {
    2: "Fountain of Dreams",
    3: "Pokémon Stadium",
    4: "Princess Peach's Castle",
    5: "Kongo Jungle",
    6: "Brinstar",
    7: "Corneria",
    8: "Yoshi's Story",
    9: "Onett",
    10: "Mute City",
    11: "Rainbow Cruise",
    12: "Jungle Japes",
    13: "Great Bay",
    14: "Hyrule Temple",
    15: "Brinstar Depths",
    16: "Yoshi's Island",
    17: "Green Greens",
    18: "Fourside",
    19: "Mushroom Kingdom I",
    20: "Mushroom Kingdom II",
    22: "Venom",
    23: "Poké Floats",
    24: "Big Blue",
    25: "Icicle Mountain",
    26: "Icetop",
    27: "Flat Zone",
    28: "Dream Land N64",
    29: "Yoshi's Island N64",
    30: "Kongo Jungle N64",
    31: "Battlefield",
    32: "Final Destination",
}

# External character ids (character select screen order)
CHARACTER_NAMES: dict[int, str] = {
    0: "Captain Falcon",
    1: "Donkey Kong",
    2: "Fox",
    3: "Mr. Game & Watch",
    4: "Kirby",
    5: "Bowser",
    6: "Link",
    7: "Luigi",
    8: "Mario",
    9: "Marth",
    10: "Mewtwo",
    11: "Ness",
    12: "Peach",
    13: "Pikachu",
    14: "Ice Climbers",
    15: "Jigglypuff",
    16: "Samus",
    17: "Yoshi",
    18: "Zelda",
    19: "Sheik",
    20: "Falco",
    21: "Young Link",
    22: "Dr. Mario",
    23: "Roy",
    24: "Pichu",
    25: "Ganondorf",
}
