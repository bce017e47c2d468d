from app.core.config import settings


def isDebugMode() -> bool:
    """True outside of production."""
    return settings.MODE != "production"
