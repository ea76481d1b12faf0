from os import getenv

class Settings:
    DATABASE_URL = getenv("DATABASE_URL", "postgresql+psycopg://taskboard:taskboard@db:5432/taskboard")
    ORDER_EPSILON = float(getenv("ORDER_EPSILON", "1e-6"))  # écart minimal entre deux clés voisines
    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")
    DASHBOARD_RECENT_LIMIT = int(getenv("DASHBOARD_RECENT_LIMIT", "5"))

settings = Settings()
