"""agencyflow: workflow automation engine for the agency management platform."""

__version__ = "0.1.0"
