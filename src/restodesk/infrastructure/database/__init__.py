"""SQLAlchemy Core schema and async engine setup."""
