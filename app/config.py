"""
Configuration for JobTrack
Reads settings from the environment (and a .env file when present)
"""

import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Environment-driven settings"""

    def __init__(self):
        self.store_backend = os.getenv("STORE_BACKEND", "memory").lower()
        self.supabase_url = os.getenv("SUPABASE_URL")
        self.supabase_anon_key = os.getenv("SUPABASE_ANON_KEY")
        self.database_url = os.getenv("DATABASE_URL")
        self.applications_table = os.getenv("APPLICATIONS_TABLE", "job_applications")
        self.stale_after_days = int(os.getenv("STALE_AFTER_DAYS", 30))
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", 8000))
        self.debug = os.getenv("DEBUG", "false").lower() == "true"


settings = Settings()
