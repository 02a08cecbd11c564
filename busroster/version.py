"""
Version
-------

.. autodata:: busroster.version.__version__
"""

__version__ = "1.0.0"
"""The current version, also reported to Sentry as the release."""

name = "busroster"
"""The name the API documents itself under."""
