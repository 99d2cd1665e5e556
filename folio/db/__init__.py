"""Folio DB — SQLAlchemy base, document table, sessions and the SQL store."""
