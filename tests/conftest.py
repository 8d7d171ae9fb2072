# tests/conftest.py
import os

# Set the TESTING environment variable before any tests are collected/run
# so the database module binds to in-memory SQLite.
os.environ["TESTING"] = "True"
