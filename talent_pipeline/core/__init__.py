"""
Core business logic modules for Talent Pipeline.

Submodules:
- pipeline: stage registry, transition validation and the application state machine
- matching: candidate-job match scoring engine
"""
