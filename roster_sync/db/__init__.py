"""PostgreSQL persistence for imports."""
