from app.config import get_settings
from app.db.repository import LedgerRepository
from app.services.lending import LendingService

settings = get_settings()

repo = LedgerRepository(settings.db_path)
service = LendingService(repo, settings)
