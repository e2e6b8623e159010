"""
Flask Extensions
Centralized extension initialization
"""
from flask_sqlalchemy import SQLAlchemy

# Initialize extensions (without app binding)
db = SQLAlchemy()
