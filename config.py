"""Configuration constants for the Song Quiz Bot."""

import os
from dotenv import load_dotenv

load_dotenv()

# Environment
DATABASE_PATH = os.getenv("DATABASE_PATH", "./data/songquiz.db")
SONG_DOWNLOAD_DIR = os.getenv("SONG_DOWNLOAD_DIR", "./songs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Round timing (seconds)
SONG_START_DELAY = 3
MULTIGUESS_DELAY = 1.5

# Interactions older than this are not acknowledged (seconds)
INTERACTION_ACK_DEADLINE = 3

# Number of recently played songs that can still be bookmarked
BOOKMARK_MESSAGE_SIZE = 10

# Elimination mode
ELIMINATION_DEFAULT_LIVES = 10
ELIMINATION_MAX_LIVES = 10000

# Sessions with no activity for this many minutes are ended
SESSION_IDLE_TIMEOUT = 30

# Scoreboards with more players than this render as a single column
SCOREBOARD_FIELD_CUTOFF = 6
EMBED_FIELDS_PER_PAGE = 20
EMBED_FIELD_VALUE_LIMIT = 1024

# Song pool
NON_PREMIUM_SONG_LIMIT = 500
PREMIUM_SONG_LIMIT = 10000

# Multiple choice: number of wrong options per difficulty
MULTIPLE_CHOICE_WRONG_OPTIONS = {
    'multiple_choice_easy': 3,
    'multiple_choice_medium': 5,
    'multiple_choice_hard': 7
}

# Buttons per row per difficulty
MULTIPLE_CHOICE_ROW_SIZE = {
    'multiple_choice_easy': 4,
    'multiple_choice_medium': 3,
    'multiple_choice_hard': 4
}

# Points
POINTS_CORRECT = 1.0
POINTS_HINT_PENALTY = 0.5
POINTS_BOTH_MODE_ARTIST = 0.2

# Typo tolerance (difflib ratio)
TYPO_SIMILARITY_THRESHOLD = 0.8
TYPO_MIN_ANSWER_LENGTH = 5

# EXP curve
EXP_CURVE_MAX = 2000
EXP_JITTER = 0.05

# EXP modifiers
EXP_MODIFIERS = {
    'vote_bonus': 2.0,
    'weekend': 2.0,
    'power_hour': 2.0,
    'first_game_of_day': 1.5,
    'quick_guess': 1.1,
    'hint_used': 0.5,
    'typos_allowed': 0.8,
    'multiple_choice_easy': 0.25,
    'multiple_choice_medium': 0.5,
    'multiple_choice_hard': 0.75,
}

# Guesses faster than this get the quick guess bonus (milliseconds)
QUICK_GUESS_MS = 1500

# Streak bonus: +5% per consecutive guess after the first, capped
STREAK_BONUS_STEP = 0.05
STREAK_BONUS_MAX_STREAK = 11

# Group size bonus: smaller groups earn more per player
GROUP_SIZE_BONUS_MAX = 1.5
GROUP_SIZE_BONUS_STEP = 0.1
GROUP_SIZE_BONUS_MIN = 0.6

# UTC hours with doubled EXP on weekdays
POWER_HOURS = {19, 20}

# Levels
MAX_LEVEL = 1000

# Embed colors
EMBED_INFO_COLOR = 0x5865F2
EMBED_ERROR_COLOR = 0xED4245
EMBED_SUCCESS_COLOR = 0x57F287
EMBED_SUCCESS_BONUS_COLOR = 0xF1C40F
EMBED_FAILURE_COLOR = 0xE67E22
