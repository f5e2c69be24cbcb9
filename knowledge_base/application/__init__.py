"""Application layer: services orchestrating core modules for the API."""
