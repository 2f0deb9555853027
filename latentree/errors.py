# errors.py

"""
The exceptions raised by latentree. Every error inherits from
`LatentreeError` and from the closest builtin exception so that callers can
catch either.
"""


class LatentreeError(Exception):
	"""Base class of every error raised by latentree."""

	pass


class InvalidArgumentError(LatentreeError, ValueError):
	"""The caller passed something that cannot be used. Not retryable."""

	pass


class UnsupportedFormatError(InvalidArgumentError):
	"""The dataset file has an extension that no reader understands."""

	pass


class StructuralError(InvalidArgumentError):
	"""An edit would break the structure of a network.

	Raised when adding an edge would introduce a self loop, a duplicated
	edge, a directed cycle or, for latent tree models, a second parent.
	"""

	pass


class NumericInconsistencyError(LatentreeError, ArithmeticError):
	"""The model assigns zero probability to evidence found in the data."""

	pass


class DataLoadError(LatentreeError, OSError):
	"""A dataset could not be read from disk."""

	pass


class ExtensionNotImplementedError(LatentreeError, NotImplementedError):
	"""An extension point was called without a concrete implementation."""

	pass
