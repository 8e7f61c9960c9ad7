import os

# keep the API module off the on-disk database during tests
os.environ.setdefault("RUNCAL_DB_PATH", ":memory:")
os.environ.setdefault("RUNCAL_TIMEZONE", "UTC")
