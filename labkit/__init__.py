"""Checked serialisation, linearizability checking, a key/value model and MapReduce apps."""

__version__ = "0.1.0"