"""cuesight: locate and classify pool / snooker balls in a table photo."""

__version__ = "0.1.0"
