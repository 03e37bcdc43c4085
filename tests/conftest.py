import os
import tempfile

# Configure the app for tests before any application module is imported
_db_dir = tempfile.mkdtemp(prefix="warehouse-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["EMAIL_SUPPRESS_SEND"] = "1"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["WAREHOUSE_OFFICE_MONTHLY_RATE"] = "150"
