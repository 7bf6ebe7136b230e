"""
Taskflow
Model registry — shared SQLAlchemy handle.

Usage:
    from taskflow.models import db
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
