"""
cronsync package

Converge a user's crontab to a declared set of jobs while keeping the
comments and jobs nobody declared.
"""

# Adds the trace level to python's logging before any module logs with it
import cronsync._logging  # isort:skip  pylint: disable=unused-import

__version__ = "0.3.0"
