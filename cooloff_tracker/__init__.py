"""Personal job application tracker with re-application cool-off dates."""

__version__ = "0.2.0"
