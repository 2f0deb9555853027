# io.py

import os

import numpy
import pandas

from scipy.io import arff

from .data import DiscreteData
from .data import MISSING_VALUE
from .variables import Variable
from .errors import DataLoadError
from .errors import InvalidArgumentError
from .errors import UnsupportedFormatError


MISSING_TOKENS = ('?', '')


def _encode(values, states):
	mapping = {state: i for i, state in enumerate(states)}
	return numpy.array([mapping.get(value, MISSING_VALUE) for value in values],
		dtype=numpy.int64)


def _read_arff(path, name):
	try:
		records, meta = arff.loadarff(path)
	except (OSError, arff.ArffError) as e:
		raise DataLoadError("Could not read {}: {}".format(path, e)) from e

	variables, columns = [], []
	for attribute in meta.names():
		kind, states = meta[attribute]
		if kind != 'nominal':
			raise UnsupportedFormatError("Attribute {} is {}, only nominal "
				"attributes are supported.".format(attribute, kind))

		values = [value.decode() if isinstance(value, bytes) else value
			for value in records[attribute]]

		variables.append(Variable(len(states), name=attribute))
		columns.append(_encode(values, states))

	X = numpy.stack(columns, axis=1) if columns else numpy.empty((0, 0))
	return DiscreteData(variables, X, name=name)


def _sort_states(values):
	try:
		return sorted(values, key=float)
	except ValueError:
		return sorted(values)


def _read_csv(path, name, weight_column):
	try:
		frame = pandas.read_csv(path, dtype=str, keep_default_na=False)
	except (OSError, pandas.errors.ParserError,
		pandas.errors.EmptyDataError) as e:
		raise DataLoadError("Could not read {}: {}".format(path, e)) from e

	weights = None
	if weight_column is not None:
		if weight_column not in frame.columns:
			raise InvalidArgumentError("Column {} not found in {}".format(
				weight_column, path))

		try:
			weights = frame.pop(weight_column).astype(numpy.float64).values
		except ValueError as e:
			raise InvalidArgumentError("Column {} of {} must hold numeric "
				"weights.".format(weight_column, path)) from e

	variables, columns = [], []
	for attribute in frame.columns:
		values = [value.strip() for value in frame[attribute]]
		states = _sort_states({value for value in values
			if value not in MISSING_TOKENS})

		variables.append(Variable(max(len(states), 1), name=attribute))
		columns.append(_encode(values, states))

	X = numpy.stack(columns, axis=1)
	return DiscreteData(variables, X, weights=weights, name=name)


def load_data(path, weight_column=None):
	"""Load a discrete dataset from disk.

	ARFF files are read with their declared nominal states, in declaration
	order. CSV files need a header row with the variable names. The states
	of a CSV column are the distinct values found in it, sorted numerically
	when possible. In both formats `?` marks a missing value, as does an
	empty CSV cell.


	Parameters
	----------
	path: str
		The path of an `.arff` or `.csv` file.

	weight_column: str or None, optional
		For CSV files, the name of a column holding the weight of each row.
		Default is None, meaning weight 1.


	Returns
	-------
	data: latentree.DiscreteData
		The dataset, named after the file.
	"""

	if os.path.isdir(path):
		raise InvalidArgumentError("{} is a directory, not a data "
			"file.".format(path))

	name, extension = os.path.splitext(os.path.basename(path))
	extension = extension.lower()

	if extension == '.arff':
		return _read_arff(path, name)
	elif extension == '.csv':
		return _read_csv(path, name, weight_column)

	raise UnsupportedFormatError("File extension {} is not "
		"supported.".format(extension or "(none)"))
