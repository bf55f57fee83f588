"""read the entries of a Matlab (TM) MAT-file

Copyright (c) 2011-2023 Nephics AB
The MIT License (MIT)
"""

__all__ = ['loadmat', 'read_entries']


import logging
import os
import struct
import sys
import zlib

from io import BytesIO

from .arrays import (etypes, inv_etypes, inv_mclasses, numeric_class_etypes,
                     compressed_numeric, char_etypes, prod, to_code_units,
                     MatrixArray, CellArray, CharArray, UnsupportedArray)
from .errors import ParseError


logger = logging.getLogger(__name__)

# classes that are recognised, but cannot be converted
unsupported_mclasses = {
    'mxSTRUCT_CLASS': 'Struct arrays not supported',
    'mxSPARSE_CLASS': 'Sparse matrices not supported',
    'mxOBJECT_CLASS': 'Object classes not supported',
    'mxFUNCTION_CLASS': 'Function classes not supported',
    'mxOPAQUE_CLASS': 'Anonymous function classes not supported',
    'mxOBJECT_CLASS_FROM_MATRIX_H': 'Object classes not supported'
}


#
# Utility functions
#

def unpack(endian, fmt, data):
    """Unpack a byte string to the given format. If the byte string
    contains more bytes than required for the given format, the function
    returns a tuple of values.
    """
    if fmt == 's':
        # read data as an array of chars
        val = struct.unpack(''.join([endian, str(len(data)), 's']),
                            data)[0]
    else:
        # read a number of values
        num = len(data) // struct.calcsize(fmt)
        val = struct.unpack(''.join([endian, str(num), fmt]), data)
        if len(val) == 1:
            val = val[0]
    return val


def read_element_tag(fd, endian):
    """Read data element tag: type and number of bytes.
    If tag is of the Small Data Element (SDE) type the element data
    is also returned.
    """
    data = fd.read(8)
    if len(data) < 8:
        raise ParseError('Unexpected end of file while reading element tag')
    mtpn = unpack(endian, 'I', data[:4])
    # The most significant two bytes of mtpn will always be 0,
    # if they are not, this must be SDE format
    num_bytes = mtpn >> 16
    if num_bytes > 0:
        # small data element format
        mtpn = mtpn & 0xFFFF
        if num_bytes > 4:
            raise ParseError('Error parsing Small Data Element (SDE) '
                             'formatted data')
        data = data[4:4 + num_bytes]
    else:
        # regular element
        num_bytes = unpack(endian, 'I', data[4:])
        data = None
    return (mtpn, num_bytes, data)


def read_element_data(fd, endian, mtps):
    """Read an element and return its type number and raw bytes.

    If list of possible matrix data types mtps is provided, the data type
    of the element is verified.
    """
    mtpn, num_bytes, data = read_element_tag(fd, endian)
    if mtps and mtpn not in [etypes[mtp]['n'] for mtp in mtps]:
        raise ParseError('Got type {}, expected {}'.format(
            mtpn, ' / '.join('{} ({})'.format(
                etypes[mtp]['n'], mtp) for mtp in mtps)))
    if data is None:
        # full format, read data
        data = fd.read(num_bytes)
        if len(data) < num_bytes:
            raise ParseError('Unexpected end of file while reading element '
                             'data')
        # Seek to next 64-bit boundary
        mod8 = num_bytes % 8
        if mod8:
            fd.seek(8 - mod8, 1)
    if mtpn not in inv_etypes or 'fmt' not in etypes[inv_etypes[mtpn]]:
        raise ParseError('Unknown data type {}'.format(mtpn))
    return mtpn, data


def read_elements(fd, endian, mtps, is_name=False):
    """Read elements from the file.

    Numeric elements are returned as a tuple of values, or a single value
    if the element holds only one.
    """
    mtpn, data = read_element_data(fd, endian, mtps)
    if is_name:
        # names are stored as miINT8 bytes
        val = [s for s in data.split(b'\0') if s]
        if len(val) == 0:
            return ''
        elif len(val) == 1:
            return val[0].decode('latin1')
        return [s.decode('latin1') for s in val]
    return unpack(endian, etypes[inv_etypes[mtpn]]['fmt'], data)


def as_tuple(val):
    if isinstance(val, tuple):
        return val
    return (val,)


def read_header(fd, endian):
    """Read and return the matrix header."""
    flag_class, nzmax = read_elements(fd, endian, ['miUINT32'])
    mclass = flag_class & 0x0FF
    if mclass not in inv_mclasses:
        raise ParseError('Unknown array class {}'.format(mclass))
    header = {
        'mclass': inv_mclasses[mclass],
        'is_logical': (flag_class >> 9 & 1) == 1,
        'is_global': (flag_class >> 10 & 1) == 1,
        'is_complex': (flag_class >> 11 & 1) == 1,
        'nzmax': nzmax
    }
    header['dims'] = as_tuple(read_elements(fd, endian, ['miINT32']))
    header['n_dims'] = len(header['dims'])
    header['name'] = read_elements(fd, endian, ['miINT8'], is_name=True)
    return header


def read_var_header(fd, endian):
    """Read full header tag.

    Return a dict with the parsed header, the file position of next tag,
    a file like object for reading the uncompressed element data.
    The header is None for an empty miMATRIX element.
    """
    tag = fd.read(8)
    if len(tag) < 8:
        raise ParseError('Unexpected end of file while reading variable')
    mtpn, num_bytes = unpack(endian, 'II', tag)
    next_pos = fd.tell() + num_bytes

    if mtpn == etypes['miCOMPRESSED']['n']:
        # read compressed data
        data = fd.read(num_bytes)
        if len(data) < num_bytes:
            raise ParseError('Unexpected end of file in compressed data')
        dcor = zlib.decompressobj()
        # from here, read of the decompressed data
        try:
            fd_var = BytesIO(dcor.decompress(data))
        except zlib.error as e:
            raise ParseError('Error in compressed data: {}'.format(e))
        del data
        fd = fd_var
        # Check the stream is not so broken as to leave cruft behind
        if dcor.flush() != b'':
            raise ParseError('Error in compressed data.')
        # read full tag from the uncompressed data
        tag = fd.read(8)
        if len(tag) < 8:
            raise ParseError('Compressed data too short for a variable')
        mtpn, num_bytes = unpack(endian, 'II', tag)

    if mtpn != etypes['miMATRIX']['n']:
        raise ParseError('Expecting miMATRIX type number {}, '
                         'got {}'.format(etypes['miMATRIX']['n'], mtpn))
    if num_bytes == 0:
        # empty array, as written by Matlab for empty cells
        return None, next_pos, fd
    # read the header
    header = read_header(fd, endian)
    return header, next_pos, fd


def is_little_endian(endian):
    if endian:
        return endian == '<'
    return sys.byteorder == 'little'


def read_numeric_array(fd, endian, header, data_etypes):
    """Read a numeric matrix, kept in column-major order."""
    if header['is_complex']:
        return UnsupportedArray(header['dims'], header['mclass'],
                                'Complex arrays not supported')
    data = as_tuple(read_elements(fd, endian, data_etypes))
    if len(data) != prod(header['dims']):
        raise ParseError('Matrix of size {} holds {} values'.format(
            header['dims'], len(data)))
    return MatrixArray(header['dims'], data, header['mclass'])


def read_char_array(fd, endian, header):
    mtpn, data = read_element_data(fd, endian, char_etypes)
    mtp = inv_etypes[mtpn]
    if mtp == 'miUTF8':
        chars = data.decode('utf-8')
    elif mtp == 'miUTF16':
        chars = data.decode(
            'utf-16-le' if is_little_endian(endian) else 'utf-16-be',
            'surrogatepass')
    else:
        # one code unit per element; surrogate pairs stay split
        codes = as_tuple(unpack(endian, etypes[mtp]['fmt'], data)) \
            if data else ()
        chars = ''.join(chr(c) for c in codes)
    # dimensions count UTF-16 code units
    chars = to_code_units(chars)
    if len(chars) != prod(header['dims']):
        raise ParseError('Char array of size {} holds {} characters'.format(
            header['dims'], len(chars)))
    return CharArray(header['dims'], chars)


def read_cell_array(fd, endian, header):
    """Read a cell array, cells in column-major order."""
    cells = []
    for i in range(prod(header['dims'])):
        # read the matrix header and array
        vheader, next_pos, fd_var = read_var_header(fd, endian)
        cells.append(read_var_array(fd_var, endian, vheader))
        # move on to next cell
        fd.seek(next_pos)
    return CellArray(header['dims'], cells)


def read_var_array(fd, endian, header):
    """Read variable array (of any supported type)."""
    if header is None:
        return MatrixArray((0, 0), [])
    mc = header['mclass']

    if mc in numeric_class_etypes:
        return read_numeric_array(
            fd, endian, header,
            set(compressed_numeric).union([numeric_class_etypes[mc]])
        )
    elif mc == 'mxCHAR_CLASS':
        return read_char_array(fd, endian, header)
    elif mc == 'mxCELL_CLASS':
        return read_cell_array(fd, endian, header)
    return UnsupportedArray(header['dims'], mc,
                            unsupported_mclasses.get(mc, 'Not supported'))


def eof(fd):
    """Determine if end-of-file is reached for file fd."""
    b = fd.read(1)
    end = len(b) == 0
    if not end:
        curpos = fd.tell()
        fd.seek(curpos - 1)
    return end


def read_endian(fd):
    """Check the file is a level 5 MAT-file and return its byte order
    as a struct format prefix ('' when it equals the native order).
    """
    # Bytes 124 through 128 contain a version integer and an
    # endian test string
    fd.seek(124)
    tst_str = fd.read(4)
    if len(tst_str) < 4:
        raise ParseError('File is too short to be a MAT-file')
    little_endian = (tst_str[2:4] == b'IM')
    if not little_endian and tst_str[2:4] != b'MI':
        raise ParseError('Not a MAT-file, endian indicator is missing')
    endian = ''
    if (sys.byteorder == 'little' and little_endian) or \
       (sys.byteorder == 'big' and not little_endian):
        # no byte swapping same endian
        pass
    elif sys.byteorder == 'little':
        # byte swapping
        endian = '>'
    else:
        # byte swapping
        endian = '<'
    maj_ind = int(little_endian)
    # major version number
    if tst_str[maj_ind] != 1:
        raise ParseError('Can only read from Matlab level 5 MAT-files')
    return endian


def read_entries(fd):
    """Read all entries of the MAT-file opened as fd.

    Returns a list of (name, array) tuples in file order. Names need not be
    unique.
    """
    endian = read_endian(fd)
    # skip the rest of the file header
    fd.seek(128)

    entries = []
    while not eof(fd):
        hdr, next_position, fd_var = read_var_header(fd, endian)
        array = read_var_array(fd_var, endian, hdr)
        name = hdr['name'] if hdr else ''
        logger.debug('Read entry "%s" (%r)', name, array)
        entries.append((name, array))

        # move on to next entry in file
        fd.seek(next_position)
    return entries


#
# Read from MAT file
#


def loadmat(filename):
    """Load the entries of a MAT-file:

    entries = loadmat(filename)

    The filename argument is either a string with the filename, or
    a file like object (it is closed when done).

    The returned ``entries`` is a list of (name, array) tuples with the
    arrays found in the MAT file, in the order they are stored.

    A ``ParseError`` exception is raised if the MAT-file is corrupt.
    Arrays of unsupported classes are returned as ``UnsupportedArray``.
    """
    if isinstance(filename, (str, os.PathLike)):
        fd = open(filename, 'rb')
    else:
        fd = filename
    with fd:
        return read_entries(fd)
