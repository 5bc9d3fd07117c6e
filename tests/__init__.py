import os

# Tests run against an in-memory database with dashboard login disabled.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DASHBOARD_USERNAME"] = ""
os.environ["LOG_LEVEL"] = "WARNING"
