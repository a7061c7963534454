"""ORM model definitions."""
