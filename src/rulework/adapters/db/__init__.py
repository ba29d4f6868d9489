"""Database helpers used by the SQLAlchemy query evaluator."""
