"""
Declarative base shared by every table of the engine.
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
