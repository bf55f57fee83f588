"""in-memory model of the arrays stored in a MAT-file

Copyright (c) 2011-2023 Nephics AB
The MIT License (MIT)

Every entry read from or written to a MAT-file is one of four array kinds,
told apart by the ``kind`` attribute:

* ``'matrix'``: ``MatrixArray``, a numeric matrix (values are floats)
* ``'cell'``: ``CellArray``, a matrix of nested arrays
* ``'char'``: ``CharArray``, a matrix of characters
* ``'unsupported'``: ``UnsupportedArray``, any other MATLAB class; only
  its class name and dimensions are kept

All arrays store their elements in column-major order, like the file format.
Char arrays hold UTF-16 code units, as MATLAB does: a character outside the
Basic Multilingual Plane takes two elements (a surrogate pair).
"""

__all__ = ['MatrixArray', 'CellArray', 'CharArray', 'UnsupportedArray',
           'new_matrix', 'new_scalar', 'new_string', 'new_cell']


# array element data types
etypes = {
    'miINT8': {'n': 1, 'fmt': 'b'},
    'miUINT8': {'n': 2, 'fmt': 'B'},
    'miINT16': {'n': 3, 'fmt': 'h'},
    'miUINT16': {'n': 4, 'fmt': 'H'},
    'miINT32': {'n': 5, 'fmt': 'i'},
    'miUINT32': {'n': 6, 'fmt': 'I'},
    'miSINGLE': {'n': 7, 'fmt': 'f'},
    'miDOUBLE': {'n': 9, 'fmt': 'd'},
    'miINT64': {'n': 12, 'fmt': 'q'},
    'miUINT64': {'n': 13, 'fmt': 'Q'},
    'miMATRIX': {'n': 14},
    'miCOMPRESSED': {'n': 15},
    'miUTF8': {'n': 16, 'fmt': 's'},
    'miUTF16': {'n': 17, 'fmt': 's'},
    'miUTF32': {'n': 18, 'fmt': 's'}
}

# inverse mapping of etypes
inv_etypes = dict((v['n'], k) for k, v in etypes.items())

# matrix array classes
mclasses = {
    'mxCELL_CLASS': 1,
    'mxSTRUCT_CLASS': 2,
    'mxOBJECT_CLASS': 3,
    'mxCHAR_CLASS': 4,
    'mxSPARSE_CLASS': 5,
    'mxDOUBLE_CLASS': 6,
    'mxSINGLE_CLASS': 7,
    'mxINT8_CLASS': 8,
    'mxUINT8_CLASS': 9,
    'mxINT16_CLASS': 10,
    'mxUINT16_CLASS': 11,
    'mxINT32_CLASS': 12,
    'mxUINT32_CLASS': 13,
    'mxINT64_CLASS': 14,
    'mxUINT64_CLASS': 15,
    'mxFUNCTION_CLASS': 16,
    'mxOPAQUE_CLASS': 17,
    'mxOBJECT_CLASS_FROM_MATRIX_H': 18
}

inv_mclasses = dict((v, k) for k, v in mclasses.items())

# map of numeric array classes to data types
numeric_class_etypes = {
    'mxDOUBLE_CLASS': 'miDOUBLE',
    'mxSINGLE_CLASS': 'miSINGLE',
    'mxINT8_CLASS': 'miINT8',
    'mxUINT8_CLASS': 'miUINT8',
    'mxINT16_CLASS': 'miINT16',
    'mxUINT16_CLASS': 'miUINT16',
    'mxINT32_CLASS': 'miINT32',
    'mxUINT32_CLASS': 'miUINT32',
    'mxINT64_CLASS': 'miINT64',
    'mxUINT64_CLASS': 'miUINT64'
}

# data types that may be used when writing numeric data
compressed_numeric = ['miINT32', 'miUINT16', 'miINT16', 'miUINT8']

# data types used for character data
char_etypes = ['miUTF8', 'miUTF16', 'miUINT8', 'miUINT16']


def prod(dims):
    n = 1
    for d in dims:
        n *= d
    return n


def to_code_units(s):
    """Split s into UTF-16 code units, one str element per unit."""
    b = s.encode('utf-16-le', 'surrogatepass')
    return ''.join(chr(b[i] | b[i + 1] << 8) for i in range(0, len(b), 2))


def from_code_units(units):
    """Join the surrogate pairs in a string of UTF-16 code units."""
    return units.encode('utf-16-le', 'surrogatepass').decode(
        'utf-16-le', 'surrogatepass')


class Array(object):
    """Base of the array kinds: dimensions and column-major indexing."""

    kind = None

    def __init__(self, dims):
        self.dims = tuple(int(d) for d in dims)

    @property
    def num_dims(self):
        return len(self.dims)

    @property
    def num_rows(self):
        return self.dims[0] if self.dims else 0

    @property
    def num_cols(self):
        return self.dims[1] if len(self.dims) > 1 else 1

    def __len__(self):
        return prod(self.dims)

    def index(self, row, col):
        """Position of element (row, col) in the column-major storage."""
        if not (0 <= row < self.num_rows and 0 <= col < self.num_cols):
            raise IndexError('Index ({}, {}) out of range for array of '
                             'size {}'.format(row, col, self.size_str()))
        return col * self.num_rows + row

    def size_str(self):
        return 'x'.join(str(d) for d in self.dims)

    def to_text(self):
        raise NotImplementedError

    def __repr__(self):
        return '<{} {}>'.format(type(self).__name__, self.size_str())


class MatrixArray(Array):

    kind = 'matrix'

    def __init__(self, dims, data, mclass='mxDOUBLE_CLASS'):
        Array.__init__(self, dims)
        self.data = [float(v) for v in data]
        self.mclass = mclass
        if len(self.data) != len(self):
            raise ValueError('Expected {} values for a {} matrix, got {}'
                             .format(len(self), self.size_str(),
                                     len(self.data)))

    def get(self, row, col):
        return self.data[self.index(row, col)]

    def to_text(self):
        if len(self) == 1:
            return repr(self.data[0])
        if len(self) == 0 or self.num_dims > 2:
            return '[]' if len(self) == 0 else '[{}]'.format(self.size_str())
        rows = (' '.join(repr(self.get(r, c)) for c in range(self.num_cols))
                for r in range(self.num_rows))
        return '[{}]'.format('; '.join(rows))

    def __eq__(self, other):
        return (isinstance(other, MatrixArray) and
                self.dims == other.dims and self.data == other.data)

    def __ne__(self, other):
        return not self == other


class CellArray(Array):

    kind = 'cell'

    def __init__(self, dims, cells=None):
        Array.__init__(self, dims)
        if cells is None:
            cells = [new_matrix((0, 0), []) for i in range(len(self))]
        self.cells = list(cells)
        if len(self.cells) != len(self):
            raise ValueError('Expected {} cells for a {} cell array, got {}'
                             .format(len(self), self.size_str(),
                                     len(self.cells)))

    def get(self, row, col):
        return self.cells[self.index(row, col)]

    def set(self, row, col, value):
        if not isinstance(value, Array):
            raise ValueError('Cell values must be arrays, got {!r}'
                             .format(value))
        self.cells[self.index(row, col)] = value

    def to_text(self):
        if len(self) == 0 or self.num_dims > 2:
            return '{}' if len(self) == 0 else '{{{}}}'.format(
                self.size_str())
        rows = (' '.join(self.get(r, c).to_text()
                         for c in range(self.num_cols))
                for r in range(self.num_rows))
        return '{{{}}}'.format('; '.join(rows))

    def __eq__(self, other):
        return (isinstance(other, CellArray) and
                self.dims == other.dims and self.cells == other.cells)

    def __ne__(self, other):
        return not self == other


class CharArray(Array):

    kind = 'char'

    def __init__(self, dims, chars):
        Array.__init__(self, dims)
        self.chars = to_code_units(''.join(chars))
        if len(self.chars) != len(self):
            raise ValueError('Expected {} characters for a {} char array, '
                             'got {}'.format(len(self), self.size_str(),
                                             len(self.chars)))

    def get(self, row, col):
        """Code unit at (row, col)."""
        return self.chars[self.index(row, col)]

    def as_string(self):
        """Return the characters row by row, rows separated by newlines."""
        if self.num_dims > 2:
            return from_code_units(self.chars)
        return '\n'.join(
            from_code_units(''.join(self.get(r, c)
                                    for c in range(self.num_cols)))
            for r in range(self.num_rows))

    def to_text(self):
        return self.as_string()

    def __eq__(self, other):
        return (isinstance(other, CharArray) and
                self.dims == other.dims and self.chars == other.chars)

    def __ne__(self, other):
        return not self == other


class UnsupportedArray(Array):
    """Placeholder for an array of a class that cannot be converted."""

    kind = 'unsupported'

    def __init__(self, dims, mclass, reason=''):
        Array.__init__(self, dims)
        self.mclass = mclass
        self.reason = reason

    def to_text(self):
        return '<{} {}>'.format(self.mclass, self.size_str())


#
# Array constructors
#

def new_matrix(dims, values):
    """Numeric matrix from column-major values."""
    return MatrixArray(dims, values)


def new_scalar(value):
    return MatrixArray((1, 1), [value])


def new_string(s):
    """Row char array holding the string s."""
    units = to_code_units(s)
    return CharArray((1 if units else 0, len(units)), units)


def new_cell(rows, cols):
    """Empty rows x cols cell array, filled with empty matrices."""
    return CellArray((rows, cols))
