"""Timer model, storage, validation and service."""
