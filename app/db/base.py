from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Importa os modelos para que sejam registrados com a Base
from app.models import (  # noqa: E402,F401
    challenge,
    profile,
    team,
    team_member,
    user_team,
    invitation,
    application,
    team_challenge,
)
