"""typed tabular datasets

Copyright (c) 2011-2023 Nephics AB
The MIT License (MIT)

A ``TabularDataset`` is a named, ordered list of ``Column`` definitions and
rows of encoded values. How a value is encoded depends on its column:

* ``NUMERIC``: the value as a float (NaN for a missing value)
* ``NOMINAL``: the index of the value in the column's sorted labels
* ``STRING``: a reference into the dataset's ``StringPool``
"""

__all__ = ['NUMERIC', 'NOMINAL', 'STRING', 'Column', 'StringPool',
           'TabularDataset']


import math

from .errors import LabelLookupError, TypeMismatch


NUMERIC = 'numeric'
NOMINAL = 'nominal'
STRING = 'string'

column_kinds = (NUMERIC, NOMINAL, STRING)

# short type tags, as stored in the header entry of a MAT-file
type_tags = {
    NUMERIC: 'NUM',
    NOMINAL: 'STR',
    STRING: 'STR'
}


class Column(object):
    """Definition of one column: name, kind and, for nominal columns,
    the sorted label set.
    """

    __slots__ = ('_name', '_kind', '_labels', '_label_index')

    def __init__(self, name, kind, labels=None):
        if kind not in column_kinds:
            raise ValueError('Unknown column kind {!r}'.format(kind))
        if kind == NOMINAL:
            if labels is None:
                raise ValueError('Nominal column "{}" needs labels'
                                 .format(name))
            labels = tuple(labels)
            if len(set(labels)) != len(labels):
                raise ValueError('Nominal column "{}" has duplicate labels'
                                 .format(name))
        elif labels is not None:
            raise ValueError('Only nominal columns have labels')
        self._name = name
        self._kind = kind
        self._labels = labels
        self._label_index = dict((l, i) for i, l in enumerate(labels)) \
            if labels is not None else None

    name = property(lambda self: self._name)
    kind = property(lambda self: self._kind)
    labels = property(lambda self: self._labels)

    @property
    def is_numeric(self):
        return self._kind == NUMERIC

    @property
    def is_nominal(self):
        return self._kind == NOMINAL

    @property
    def is_string(self):
        return self._kind == STRING

    @property
    def type_tag(self):
        return type_tags[self._kind]

    def index_of_label(self, label):
        try:
            return self._label_index[label]
        except KeyError:
            raise LabelLookupError('Value {!r} is not a label of column "{}"'
                                   .format(label, self._name))

    def encode(self, value, strings):
        """Encode a plain value for storage in a row of this column.

        Text values are interned in the string pool strings.
        """
        if self._kind == NUMERIC:
            if value is None:
                return float('nan')
            if isinstance(value, (bool, str, bytes)):
                raise TypeMismatch('Column "{}" is numeric, got {!r}'
                                   .format(self._name, value))
            try:
                return float(value)
            except (TypeError, ValueError):
                raise TypeMismatch('Column "{}" is numeric, got {!r}'
                                   .format(self._name, value))
        if not isinstance(value, str):
            raise TypeMismatch('Column "{}" holds text, got {!r}'
                               .format(self._name, value))
        if self._kind == NOMINAL:
            return self.index_of_label(value)
        return strings.intern(value)

    def decode(self, value, strings):
        if self._kind == NUMERIC:
            return value
        if self._kind == NOMINAL:
            return self._labels[value]
        return strings[value]

    def to_dict(self):
        d = {'name': self._name, 'type': self._kind}
        if self._labels is not None:
            d['labels'] = list(self._labels)
        return d

    @classmethod
    def from_dict(cls, d):
        return cls(d['name'], d['type'], d.get('labels'))

    def __eq__(self, other):
        return (isinstance(other, Column) and
                (self._name, self._kind, self._labels) ==
                (other._name, other._kind, other._labels))

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((self._name, self._kind, self._labels))

    def __repr__(self):
        if self._labels is not None:
            return 'Column({!r}, {!r}, {!r})'.format(
                self._name, self._kind, list(self._labels))
        return 'Column({!r}, {!r})'.format(self._name, self._kind)


class StringPool(object):
    """Interning table for the values of text columns."""

    def __init__(self):
        self._strings = []
        self._index = {}

    def intern(self, s):
        try:
            return self._index[s]
        except KeyError:
            self._index[s] = len(self._strings)
            self._strings.append(s)
            return self._index[s]

    def __getitem__(self, ref):
        return self._strings[ref]

    def __len__(self):
        return len(self._strings)


class TabularDataset(object):

    def __init__(self, name, columns):
        self.name = name
        self.columns = tuple(columns)
        names = [c.name for c in self.columns]
        if len(set(names)) != len(names):
            raise ValueError('Column names must be unique')
        self.rows = []
        self.strings = StringPool()

    @property
    def num_columns(self):
        return len(self.columns)

    @property
    def num_rows(self):
        return len(self.rows)

    def __len__(self):
        return len(self.rows)

    def column(self, name):
        for c in self.columns:
            if c.name == name:
                return c
        raise KeyError(name)

    def add_row(self, values):
        """Encode and append a row of plain values (floats, or strings for
        nominal and text columns).
        """
        values = list(values)
        if len(values) != len(self.columns):
            raise ValueError('Row has {} values, dataset has {} columns'
                             .format(len(values), len(self.columns)))
        self.rows.append([c.encode(v, self.strings)
                          for c, v in zip(self.columns, values)])

    def value(self, row, col):
        """Decoded value of a cell: float, label or text."""
        return self.columns[col].decode(self.rows[row][col], self.strings)

    def string_value(self, row, col):
        value = self.value(row, col)
        if self.columns[col].is_numeric:
            return repr(value)
        return value

    def is_missing(self, row, col):
        return (self.columns[col].is_numeric and
                math.isnan(self.rows[row][col]))

    def values(self):
        """Iterate over the rows as lists of decoded values."""
        for r in range(len(self.rows)):
            yield [self.value(r, c) for c in range(len(self.columns))]

    def structure(self):
        """Return an empty dataset with the same name and columns."""
        return TabularDataset(self.name, self.columns)

    def to_dict(self):
        """Return the dataset as JSON compatible data, with decoded values.
        Missing numbers become None.
        """
        rows = [[None if c.is_numeric and math.isnan(v) else v
                 for c, v in zip(self.columns, row)]
                for row in self.values()]
        return {
            'name': self.name,
            'columns': [c.to_dict() for c in self.columns],
            'rows': rows
        }

    @classmethod
    def from_dict(cls, d):
        if not isinstance(d, dict) or 'columns' not in d:
            raise ValueError('A dataset must be an object with "columns", '
                             'got {}'.format(type(d).__name__))
        dataset = cls(d.get('name', ''),
                      [Column.from_dict(c) for c in d['columns']])
        for row in d.get('rows', []):
            dataset.add_row(row)
        return dataset

    def __eq__(self, other):
        if not isinstance(other, TabularDataset):
            return NotImplemented
        return (self.name == other.name and
                self.columns == other.columns and
                self.to_dict()['rows'] == other.to_dict()['rows'])

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __repr__(self):
        return '<TabularDataset "{}" {} rows x {} columns>'.format(
            self.name, len(self.rows), len(self.columns))
