"""Async clients for the Gemini and OpenAI chat APIs with session management."""

__version__ = "3.8.0"