"""
Infrastructure layer - persistence and external service integrations.

Each subdirectory wraps an external dependency:
- storage: Record stores (local JSON mirror) and entity persistence
- snowflake: Remote table store
- anthropic: Claude API client for generated text
- weather: Open-Meteo forecast and geocoding

These wrappers translate between external formats and our domain models.
"""
