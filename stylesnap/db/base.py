"""Declarative base for all ORM models"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()
