"""Store service business logic (catalog and order stores, checkout workflow)."""
