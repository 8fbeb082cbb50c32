"""Strategy service application package."""
