"""Core building blocks: authentication, authorization and HTTP adapters."""
