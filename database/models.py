"""Database models and schemas."""

# SQL schemas for all tables

CREATE_GUILDS_TABLE = """
CREATE TABLE IF NOT EXISTS guilds (
    guild_id TEXT PRIMARY KEY,
    join_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    last_active TIMESTAMP,
    games_played INTEGER DEFAULT 0,
    songs_guessed INTEGER DEFAULT 0
);
"""

CREATE_GUILD_PREFERENCES_TABLE = """
CREATE TABLE IF NOT EXISTS guild_preferences (
    guild_id TEXT PRIMARY KEY,
    game_options TEXT,
    locale TEXT DEFAULT 'en'
);
"""

CREATE_AVAILABLE_SONGS_TABLE = """
CREATE TABLE IF NOT EXISTS available_songs (
    youtube_link TEXT PRIMARY KEY,
    song_name TEXT NOT NULL,
    hangul_song_name TEXT,
    artist_name TEXT NOT NULL,
    hangul_artist_name TEXT,
    artist_id INTEGER NOT NULL,
    members TEXT NOT NULL,
    publish_date DATE,
    views INTEGER DEFAULT 0,
    duration REAL,
    song_aliases TEXT,
    artist_aliases TEXT
);
"""

CREATE_PLAYER_STATS_TABLE = """
CREATE TABLE IF NOT EXISTS player_stats (
    player_id TEXT PRIMARY KEY,
    songs_guessed REAL DEFAULT 0,
    games_played INTEGER DEFAULT 0,
    exp INTEGER DEFAULT 0,
    level INTEGER DEFAULT 1,
    first_play TIMESTAMP,
    last_active TIMESTAMP
);
"""

CREATE_PLAYER_SERVERS_TABLE = """
CREATE TABLE IF NOT EXISTS player_servers (
    player_id TEXT NOT NULL,
    server_id TEXT NOT NULL,
    PRIMARY KEY (player_id, server_id)
);
"""

CREATE_PLAYER_GAME_SESSION_STATS_TABLE = """
CREATE TABLE IF NOT EXISTS player_game_session_stats (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    player_id TEXT NOT NULL,
    date TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    songs_guessed REAL DEFAULT 0,
    exp_gained INTEGER DEFAULT 0,
    levels_gained INTEGER DEFAULT 0
);
"""

CREATE_GAME_SESSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS game_sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    start_date TIMESTAMP,
    guild_id TEXT NOT NULL,
    num_participants INTEGER,
    avg_guess_time REAL,
    session_length REAL,
    rounds_played INTEGER,
    correct_guesses INTEGER
);
"""

CREATE_SONG_METADATA_TABLE = """
CREATE TABLE IF NOT EXISTS song_metadata (
    vlink TEXT PRIMARY KEY,
    correct_guesses INTEGER DEFAULT 0,
    rounds_played INTEGER DEFAULT 0,
    skip_count INTEGER DEFAULT 0,
    hint_count INTEGER DEFAULT 0,
    time_to_guess_ms INTEGER DEFAULT 0,
    time_played_ms INTEGER DEFAULT 0
);
"""

CREATE_BOOKMARKED_SONGS_TABLE = """
CREATE TABLE IF NOT EXISTS bookmarked_songs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    vlink TEXT NOT NULL,
    bookmarked_at TIMESTAMP
);
"""

CREATE_PREMIUM_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS premium_users (
    user_id TEXT PRIMARY KEY,
    active BOOLEAN DEFAULT TRUE
);
"""

CREATE_TOP_GG_USER_VOTES_TABLE = """
CREATE TABLE IF NOT EXISTS top_gg_user_votes (
    user_id TEXT PRIMARY KEY,
    buff_expiry_date TIMESTAMP
);
"""

ALL_TABLES = [
    CREATE_GUILDS_TABLE,
    CREATE_GUILD_PREFERENCES_TABLE,
    CREATE_AVAILABLE_SONGS_TABLE,
    CREATE_PLAYER_STATS_TABLE,
    CREATE_PLAYER_SERVERS_TABLE,
    CREATE_PLAYER_GAME_SESSION_STATS_TABLE,
    CREATE_GAME_SESSIONS_TABLE,
    CREATE_SONG_METADATA_TABLE,
    CREATE_BOOKMARKED_SONGS_TABLE,
    CREATE_PREMIUM_USERS_TABLE,
    CREATE_TOP_GG_USER_VOTES_TABLE,
]

# Indexes for performance
CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_songs_views ON available_songs(views DESC);",
    "CREATE INDEX IF NOT EXISTS idx_songs_artist ON available_songs(artist_id);",
    "CREATE INDEX IF NOT EXISTS idx_session_stats_player ON player_game_session_stats(player_id);",
    "CREATE INDEX IF NOT EXISTS idx_session_stats_date ON player_game_session_stats(date DESC);",
    "CREATE INDEX IF NOT EXISTS idx_bookmarks_user ON bookmarked_songs(user_id);",
    "CREATE INDEX IF NOT EXISTS idx_game_sessions_guild ON game_sessions(guild_id);",
]
