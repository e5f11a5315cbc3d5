"""Core data models, configuration and operator abstractions."""
