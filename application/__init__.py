"""
Application Layer for the training plan mapper.

This package contains:
- ports/: Abstract interface for the destination platform
- use_cases/: Export orchestration and container conflict resolution
- exceptions.py: Errors raised by adapters and the conflict policy
"""
