"""
Hotel Facilities Platform
SQLAlchemy models package.

The shared ``db`` handle lives here so every model module and service can do:

    from facilities.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
