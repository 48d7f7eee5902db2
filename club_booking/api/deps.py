from club_booking.config import get_settings
from club_booking.infrastructure.db.engine import build_engine, build_sessionmaker

settings = get_settings()

# Sin DATABASE_URL se usa SQLite en memoria para desarrollo y pruebas
DB_URL = settings.database_url or "sqlite+aiosqlite:///:memory:"

engine = build_engine(settings.model_copy(update={"database_url": DB_URL}))
AsyncSessionLocal = build_sessionmaker(engine)
