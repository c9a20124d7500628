"""Shared Flask extensions used by the ticket lookup and future modules."""

from flask_sqlalchemy import SQLAlchemy

# SQLAlchemy instance initialized in app.py so blueprints/services can import `db`.
db = SQLAlchemy()
