import os
import tempfile

# The app reads DATABASE_URL at import time; point it at a throwaway SQLite file first.
_db_dir = tempfile.mkdtemp(prefix="tradequote-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["ENV"] = "test"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["SUPPORT_ADMIN_USERNAMES"] = ""

from tradequote.db.init_db import create_tables, seed_reference_data  # noqa: E402
from tradequote.db.session import SessionLocal  # noqa: E402

create_tables()
_db = SessionLocal()
try:
    seed_reference_data(_db)
finally:
    _db.close()
