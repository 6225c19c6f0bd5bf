"""modman: a module manager front end with project lifecycle hooks."""

__version__ = '0.1.0'
