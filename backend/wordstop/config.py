import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Rounds
    ROUND_START_DELAY_SEC = float(os.environ.get("ROUND_START_DELAY_SEC", "5"))
    SECONDS_PER_CATEGORY = float(os.environ.get("SECONDS_PER_CATEGORY", "5"))
    ROUND_STOP_GRACE_SEC = float(os.environ.get("ROUND_STOP_GRACE_SEC", "3"))

    # Voting
    CATEGORY_VOTE_DURATION_SEC = float(os.environ.get("CATEGORY_VOTE_DURATION_SEC", "7.5"))
    # 0 keeps the room open on a leaderboard after voting.
    CLOSE_ROOM_AFTER_VOTING = os.environ.get("CLOSE_ROOM_AFTER_VOTING", "1") == "1"

    # Liveness
    EMPTY_ROOM_TTL_SEC = float(os.environ.get("EMPTY_ROOM_TTL_SEC", "10"))
    PLAYER_INACTIVITY_TIMEOUT_SEC = float(os.environ.get("PLAYER_INACTIVITY_TIMEOUT_SEC", "30"))
