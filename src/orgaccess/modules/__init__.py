"""Feature modules exposing access-control endpoints."""
