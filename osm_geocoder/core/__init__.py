"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Tag vocabularies, dataset names, geometry constants
- exceptions: Custom exception hierarchy
"""
