"""write entries to a Matlab (TM) MAT-file

Copyright (c) 2011-2023 Nephics AB
The MIT License (MIT)
"""

__all__ = ['savemat', 'write_entries']


import logging
import os
import struct
import sys
import time
import zlib

from collections.abc import Sequence, Mapping
from io import BytesIO

from .arrays import etypes, mclasses


logger = logging.getLogger(__name__)


#
# Utility functions
#


def write_file_header(fd):
    # write file header
    desc = 'MATLAB 5.0 MAT-file, created with mattab on: ' + \
           time.strftime("%a, %b %d %Y %H:%M:%S", time.localtime())
    fd.write(struct.pack('116s', desc.encode('latin1')))
    fd.write(struct.pack('8s', b' ' * 8))
    fd.write(struct.pack('H', 0x100))
    if sys.byteorder == 'big':
        fd.write(struct.pack('2s', b'MI'))
    else:
        fd.write(struct.pack('2s', b'IM'))


def write_elements(fd, mtp, data, is_name=False):
    """Write data element tag and data.

    The tag contains the array type and the number of
    bytes the array data will occupy when written to file.

    If data occupies 4 bytes or less, it is written immediately
    as a Small Data Element (SDE).
    """
    fmt = etypes[mtp]['fmt']
    if isinstance(data, bytes):
        if is_name and len(data) > 31:
            raise ValueError(
                'Name "{}" is too long (max. 31 '
                'characters allowed)'.format(data.decode('latin1')))
        fmt = '{}s'.format(len(data))
        data = (data,)
    elif isinstance(data, Sequence):
        l = len(data)
        if l == 0:
            # empty array
            fmt = ''
        if l > 1:
            # more than one element to be written
            fmt = '{}{}'.format(l, fmt)
    else:
        data = (data,)
    num_bytes = struct.calcsize(fmt)
    if num_bytes <= 4:
        # write SDE
        if num_bytes < 4:
            # add pad bytes
            fmt += '{}x'.format(4 - num_bytes)
        fd.write(struct.pack('I', num_bytes << 16 | etypes[mtp]['n']))
        fd.write(struct.pack(fmt, *data))
        return
    # write tag: element type and number of bytes
    fd.write(struct.pack('II', etypes[mtp]['n'], num_bytes))
    # add pad bytes to fmt, if needed
    mod8 = num_bytes % 8
    if mod8:
        fmt += '{}x'.format(8 - mod8)
    # write data
    fd.write(struct.pack(fmt, *data))


def write_var_header(fd, mclass, dims, name):
    """Write variable header"""

    # write tag bytes,
    # and array flags + class and nzmax (null bytes)
    fd.write(struct.pack('II', etypes['miUINT32']['n'], 8))
    fd.write(struct.pack('I4x', mclasses[mclass]))

    # write dimensions array
    write_elements(fd, 'miINT32', list(dims))

    # write var name
    write_elements(fd, 'miINT8', name.encode('latin1'), is_name=True)


def write_var_data(fd, data):
    """Write variable data to file"""
    # write array data elements (size info)
    fd.write(struct.pack('II', etypes['miMATRIX']['n'], len(data)))

    # write the data
    fd.write(data)


def write_compressed_var_array(fd, array, name):
    """Write compressed variable data to file"""
    bd = BytesIO()

    write_var_array(bd, array, name)

    data = zlib.compress(bd.getvalue())
    bd.close()

    # write array data elements (size info)
    fd.write(struct.pack('II', etypes['miCOMPRESSED']['n'], len(data)))

    # write the compressed data
    fd.write(data)


def write_numeric_array(fd, array, name):
    """Write the numeric array as doubles"""
    # make a memory file for writing array data
    bd = BytesIO()

    # write matrix header to memory file
    write_var_header(bd, 'mxDOUBLE_CLASS', array.dims, name)

    # write matrix data (column major) to memory file
    write_elements(bd, 'miDOUBLE', array.data)

    # write the variable to disk file
    data = bd.getvalue()
    bd.close()
    write_var_data(fd, data)


def write_char_array(fd, array, name):
    bd = BytesIO()
    write_var_header(bd, 'mxCHAR_CLASS', array.dims, name)

    if all(ord(c) < 128 for c in array.chars):
        write_elements(bd, 'miUTF8', array.chars.encode('ascii'))
    else:
        # one UTF-16 code unit per element, as counted by the dimensions
        write_elements(bd, 'miUINT16', [ord(c) for c in array.chars])

    data = bd.getvalue()
    bd.close()
    write_var_data(fd, data)


def write_cell_array(fd, array, name):
    # make a memory file for writing array data
    bd = BytesIO()

    # write matrix header to memory file
    write_var_header(bd, 'mxCELL_CLASS', array.dims, name)

    # cells are stored in column major order, as in the file
    for cell in array.cells:
        write_var_array(bd, cell)

    # write the variable to disk file
    data = bd.getvalue()
    bd.close()
    write_var_data(fd, data)


def write_var_array(fd, array, name=''):
    """Write variable array (of any supported type)"""
    kind = getattr(array, 'kind', None)
    if kind == 'matrix':
        return write_numeric_array(fd, array, name)
    elif kind == 'char':
        return write_char_array(fd, array, name)
    elif kind == 'cell':
        return write_cell_array(fd, array, name)
    raise ValueError('Cannot write array {!r}'.format(array))


def write_entries(fd, entries):
    """Write a complete MAT-file with the (name, array) entries to fd."""
    write_file_header(fd)

    # write variables
    for name, array in entries:
        logger.debug('Writing entry "%s" (%r)', name, array)
        write_compressed_var_array(fd, array, name)


#
# Write to MAT file
#


def savemat(filename, entries):
    """Save entries to MAT-file:

    savemat(filename, entries)

    The filename argument is either a string with the filename, or
    a file like object (it is closed when done).

    The parameter ``entries`` is a list of (name, array) tuples, or a dict
    mapping names to arrays. A list may repeat a name.

    A ``ValueError`` exception is raised if an array cannot be mapped to a
    known MAT array type, or a name is too long.
    """
    if isinstance(entries, Mapping):
        entries = list(entries.items())

    # serialize first, so that a bad array leaves no partial file behind
    bd = BytesIO()
    write_entries(bd, entries)

    if isinstance(filename, (str, os.PathLike)):
        fd = open(filename, 'wb')
    else:
        fd = filename
    with fd:
        fd.write(bd.getvalue())
