"""Core application configuration and shared resources."""
