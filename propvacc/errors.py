""" errors.py

Exceptions raised across the package and the shared coverage check. """
import numpy as np

class InvalidArgumentError(ValueError):
	""" A coverage outside [0,1] or mismatched vector lengths. """

class ConfigurationError(ValueError):
	""" An unsupported combination of arguments, e.g. four routine doses. """

class InternalInvariantError(RuntimeError):
	""" A computed distribution that is not a valid probability mass function. """

def check_coverage(value,name="coverage"):

	""" Return value as a float, raising InvalidArgumentError if it isn't
	a proportion in [0,1]. NaN is rejected. """

	try:
		value = float(value)
	except (TypeError, ValueError):
		raise InvalidArgumentError("{} must be a number, got {!r}".format(name,value))
	if np.isnan(value) or value < 0 or value > 1:
		raise InvalidArgumentError("{} must be between 0 and 1, got {}".format(name,value))
	return value
