"""Authentication primitives consumed by the authorization layer."""
