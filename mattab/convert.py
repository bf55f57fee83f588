"""conversion between MAT-file arrays and tabular datasets

Copyright (c) 2011-2023 Nephics AB
The MIT License (MIT)

Reading: an entry is selected from the container, its array is turned into
a grid of floats and strings, every column of the grid is profiled to find
its kind, and the rows are encoded under the resulting schema.

Writing: a dataset is turned into two cell array entries, a 2 x C header
with column names and type tags, and an R x C data grid.
"""

__all__ = ['DEFAULT_MAX_NOMINAL_VALUES', 'classify_cell', 'extract_grid',
           'profile_column', 'build_schema', 'materialize', 'select_entry',
           'convert', 'encode_header', 'encode_data', 'encode']


import logging

from .arrays import new_cell, new_scalar, new_string
from .dataset import NUMERIC, NOMINAL, STRING, Column, TabularDataset
from .errors import (EntryNotFound, NoData, TypeMismatch,
                     UnsupportedArrayKind, UnsupportedDimensionality)


logger = logging.getLogger(__name__)

# beyond this many distinct values a column becomes a text column;
# -1 means always nominal, 0 always text
DEFAULT_MAX_NOMINAL_VALUES = 25


#
# Read path
#

def classify_cell(value):
    """Classify an array embedded in a cell as a number (float) or text
    (str). Char arrays are always text, anything else is a number if its
    textual form parses as one.
    """
    if value.kind == 'char':
        return value.as_string()
    text = value.to_text()
    try:
        return float(text)
    except ValueError:
        return text


def extract_grid(array):
    """Return the rows x cols grid of floats and strings of an array."""
    if array.num_dims > 2:
        raise UnsupportedDimensionality(
            'Cannot handle arrays with more than two dimensions, '
            'received: {}'.format(array.num_dims))
    if array.kind == 'matrix':
        cell = array.get
    elif array.kind == 'cell':
        cell = lambda r, c: classify_cell(array.get(r, c))
    elif array.kind == 'char':
        cell = array.get
    else:
        raise UnsupportedArrayKind('Unhandled array type: {}{}'.format(
            getattr(array, 'mclass', type(array).__name__),
            ' ({})'.format(array.reason) if getattr(array, 'reason', '')
            else ''))
    return tuple(tuple(cell(r, c) for c in range(array.num_cols))
                 for r in range(array.num_rows))


def as_text(value):
    if isinstance(value, float):
        return repr(value)
    return value


def profile_column(values, max_nominal_values=DEFAULT_MAX_NOMINAL_VALUES):
    """Determine the kind of a column from its grid values.

    Returns a (kind, labels) tuple, labels being the sorted distinct values
    for a nominal column and None otherwise. A column is numeric only if
    every value is a number (so a column without values is numeric).
    """
    distinct = {}
    numeric = True
    for value in values:
        if not isinstance(value, float):
            numeric = False
        distinct[as_text(value)] = None
    if numeric:
        return NUMERIC, None
    if max_nominal_values == -1 or len(distinct) <= max_nominal_values:
        return NOMINAL, tuple(sorted(distinct))
    return STRING, None


def build_schema(profiles):
    """Turn (kind, labels) profiles into columns named col-1, col-2, ..."""
    return [Column('col-{}'.format(i + 1), kind, labels)
            for i, (kind, labels) in enumerate(profiles)]


def materialize(dataset, grid):
    """Encode the rows of grid into dataset, following its columns."""
    columns = dataset.columns
    for row in grid:
        encoded = []
        for column, value in zip(columns, row):
            if column.is_numeric:
                if not isinstance(value, float):
                    raise TypeMismatch(
                        'Value {!r} in numeric column "{}" is not a number'
                        .format(value, column.name))
                encoded.append(value)
            elif column.is_nominal:
                encoded.append(column.index_of_label(as_text(value)))
            else:
                encoded.append(dataset.strings.intern(as_text(value)))
        dataset.rows.append(encoded)
    return dataset


def select_entry(entries, entry_name='', source=''):
    """Pick the (name, array) entry to convert from entries.

    With an empty entry_name the first entry is used, otherwise the last
    entry of that name.
    """
    selected = None
    logger.info('Entries in: %s', source)
    for i, (name, value) in enumerate(entries):
        logger.info('%d: %s', i + 1, name)
        if name == entry_name or (not entry_name and selected is None):
            selected = (name, value)
    if selected is None:
        raise EntryNotFound('Failed to load array with name: {}'
                            .format(entry_name))
    return selected


def convert(array, name, max_nominal_values=DEFAULT_MAX_NOMINAL_VALUES):
    """Convert a MAT-file array into a TabularDataset called name."""
    grid = extract_grid(array)
    profiles = [profile_column([row[i] for row in grid], max_nominal_values)
                for i in range(array.num_cols)]
    dataset = TabularDataset(name, build_schema(profiles))
    return materialize(dataset, grid)


#
# Write path
#

def encode_header(dataset):
    """Return the 2 x C cell array with column names and type tags."""
    cell = new_cell(2, dataset.num_columns)
    for i, column in enumerate(dataset.columns):
        cell.set(0, i, new_string(column.name))
        cell.set(1, i, new_string(column.type_tag))
    return cell


def encode_data(dataset):
    """Return the R x C cell array of the dataset values: numbers as
    scalars, all other values as strings.
    """
    cell = new_cell(dataset.num_rows, dataset.num_columns)
    for n in range(dataset.num_rows):
        for i, column in enumerate(dataset.columns):
            if column.is_numeric:
                cell.set(n, i, new_scalar(dataset.value(n, i)))
            else:
                cell.set(n, i, new_string(dataset.string_value(n, i)))
    return cell


def encode(dataset, header_name='header', data_name='data'):
    """Return the (name, array) entries storing dataset in a MAT-file."""
    if dataset is None or dataset.num_rows == 0:
        raise NoData('No instances to save')
    return [(header_name, encode_header(dataset)),
            (data_name, encode_data(dataset))]
