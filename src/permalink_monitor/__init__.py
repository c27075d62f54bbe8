"""Watch GitHub activity for links to branches and suggest permanent ones."""

__version__ = "0.1.0"
