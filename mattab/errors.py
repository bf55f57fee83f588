"""exceptions raised by mattab

Copyright (c) 2011-2023 Nephics AB
The MIT License (MIT)
"""

__all__ = ['MatTabError', 'ParseError', 'UnsupportedDimensionality',
           'UnsupportedArrayKind', 'EntryNotFound', 'TypeMismatch',
           'LabelLookupError', 'NoData', 'IncompatibleMode',
           'SourceUnavailable']


class MatTabError(Exception):
    pass


class ParseError(MatTabError):
    pass


class UnsupportedDimensionality(MatTabError):
    pass


class UnsupportedArrayKind(MatTabError):
    pass


class EntryNotFound(MatTabError, IOError):
    pass


class TypeMismatch(MatTabError, TypeError):
    pass


class LabelLookupError(MatTabError, LookupError):
    """A categorical value is missing from its column's label set.

    The label set is built from the very values being looked up, so this
    signals an internal inconsistency rather than bad input.
    """


class NoData(MatTabError, IOError):
    pass


class IncompatibleMode(MatTabError, IOError):
    pass


class SourceUnavailable(MatTabError, IOError):
    pass
