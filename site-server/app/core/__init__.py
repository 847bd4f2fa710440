"""Configuration and service wiring."""
