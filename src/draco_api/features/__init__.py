"""Feature modules built on the core authorization layer."""
