# Ensure project root is on sys.path for tests and point the app at throwaway
# storage before albumvault.config is first imported.
import os
import sys
import tempfile

ROOT = os.path.dirname(os.path.abspath(__file__))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="albumvault-uploads-"))
