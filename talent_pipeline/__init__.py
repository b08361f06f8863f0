"""
Talent Pipeline - application pipeline and match-scoring core of the job board.

Submodules:
- core: stage registry, transition validator, state machine, matching engine
- data: pydantic models, MongoDB connection and repositories
- services: pipeline service and notification dispatch
- utils: configuration, logging and constants
"""

__app_name__ = "Talent Pipeline"
__version__ = "0.1.0"
