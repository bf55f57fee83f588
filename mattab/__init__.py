"""mattab - tabular datasets from and to Matlab (TM) MAT-files

This module converts between the arrays stored in a MAT-file and typed
tabular datasets:

    loader = MatLoader(entry_name='', max_nominal_values=25)
    loader.set_source(filename)
    dataset = loader.get_data_set()

    saver = MatSaver(entry_name_header='header', entry_name_data='data')
    saver.set_instances(dataset)
    saver.set_destination(filename)
    saver.write_batch()

A numeric matrix, a cell array or a char array is read as a dataset with
columns named col-1, col-2, ... A column is numeric if all its values are
numbers. Otherwise it is nominal, with the sorted distinct values as labels,
as long as it has no more than ``max_nominal_values`` distinct values
(-1 for no limit), and a text column beyond that.

A dataset is written as two cell arrays: a 2 x C header with the column
names and type tags, and an R x C array with the values, numbers as scalars
and everything else as strings.

The functions ``loadmat`` and ``savemat`` read and write the raw entries of
a MAT-file as a list of (name, array) tuples.

The following Matlab data structures/types are not supported:

* Arrays with more than 2 dimensions
* Arrays with complex numbers
* Sparse arrays
* Struct arrays
* Function arrays
* Object classes
* Anonymous function classes
"""
from .arrays import (MatrixArray, CellArray, CharArray, UnsupportedArray,
                     new_matrix, new_scalar, new_string, new_cell)
from .converters import MatLoader, MatSaver
from .dataset import NUMERIC, NOMINAL, STRING, Column, TabularDataset
from .errors import (MatTabError, ParseError, UnsupportedDimensionality,
                     UnsupportedArrayKind, EntryNotFound, TypeMismatch,
                     LabelLookupError, NoData, IncompatibleMode,
                     SourceUnavailable)
from .loadmat import loadmat
from .savemat import savemat

__version__ = '0.1.0'
__all__ = ['MatLoader', 'MatSaver', 'TabularDataset', 'Column',
           'NUMERIC', 'NOMINAL', 'STRING', 'loadmat', 'savemat',
           'MatrixArray', 'CellArray', 'CharArray', 'UnsupportedArray',
           'new_matrix', 'new_scalar', 'new_string', 'new_cell',
           'MatTabError', 'ParseError', 'UnsupportedDimensionality',
           'UnsupportedArrayKind', 'EntryNotFound', 'TypeMismatch',
           'LabelLookupError', 'NoData', 'IncompatibleMode',
           'SourceUnavailable']
