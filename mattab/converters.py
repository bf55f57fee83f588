"""loader and saver for tabular datasets stored in MAT-files

Copyright (c) 2011-2023 Nephics AB
The MIT License (MIT)

``MatLoader`` reads one entry of a MAT-file as a ``TabularDataset``,
``MatSaver`` writes a ``TabularDataset`` as a header and a data entry.
Both work in batch mode only; incremental calls are refused.
"""

__all__ = ['MatLoader', 'MatSaver', 'FILE_EXTENSION',
           'FILE_EXTENSION_COMPRESSED']


import gzip
import logging
import os
import stat
import tempfile

from io import BytesIO

from .convert import DEFAULT_MAX_NOMINAL_VALUES, convert, encode, \
    select_entry
from .errors import IncompatibleMode, NoData, SourceUnavailable
from .loadmat import loadmat
from .savemat import write_entries


logger = logging.getLogger(__name__)

FILE_EXTENSION = '.mat'
FILE_EXTENSION_COMPRESSED = '.gz'

# mode of newly written files
DEFAULT_FILE_MODE = 0o644

DEFAULT_ENTRY_NAME = ''
DEFAULT_ENTRY_NAME_HEADER = 'header'
DEFAULT_ENTRY_NAME_DATA = 'data'

# retrieval modes
NONE = 'none'
BATCH = 'batch'
INCREMENTAL = 'incremental'

# loader states
UNINITIALIZED = 'uninitialized'
STRUCTURE_KNOWN = 'structure-known'
DATA_READ = 'data-read'

# saver states
WRITING = 'writing'
DONE = 'done'


class MatLoader(object):
    """Reads an entry of a MAT-file as a tabular dataset.

    entry_name selects the entry to read, the first one if empty.
    max_nominal_values is the largest number of distinct values a text
    column may have to be nominal; -1 for always nominal, 0 for always
    text.
    """

    def __init__(self, entry_name=DEFAULT_ENTRY_NAME,
                 max_nominal_values=DEFAULT_MAX_NOMINAL_VALUES):
        self.entry_name = entry_name
        self.max_nominal_values = max_nominal_values
        self._file = None
        self._buffer = None
        self._source_name = ''
        self.reset()

    @property
    def max_nominal_values(self):
        return self._max_nominal_values

    @max_nominal_values.setter
    def max_nominal_values(self, value):
        self._max_nominal_values = max(int(value), -1)

    @property
    def retrieval(self):
        return self._retrieval

    def reset(self):
        """Forget the structure read so far, keeping the source."""
        self._structure = None
        self._retrieval = NONE
        self.state = UNINITIALIZED

    def set_source(self, source):
        """Set the file (a path) or stream to read from.

        A path ending in '.gz' is read as a gzip compressed file. A stream is
        read completely and closed.
        """
        self.reset()
        self._file = None
        self._buffer = None
        self._source_name = ''
        if source is None:
            raise SourceUnavailable('Source file object is null!')

        if isinstance(source, (str, os.PathLike)):
            source = os.fspath(source)
            if not os.path.isfile(source):
                raise SourceUnavailable('File not found: {}'.format(source))
            self._file = os.path.abspath(source)
            self._source_name = os.path.basename(source)
            return

        try:
            with source:
                self._buffer = source.read()
        except (IOError, OSError) as e:
            raise SourceUnavailable('Failed to read source: {}'.format(e))
        self._source_name = os.path.basename(str(getattr(source, 'name', '')))

    def _read_source(self):
        if self._buffer is not None:
            return self._buffer
        if self._file is None:
            raise SourceUnavailable('No source has been specified')
        try:
            if self._file.endswith(FILE_EXTENSION_COMPRESSED):
                fd = gzip.open(self._file, 'rb')
            else:
                fd = open(self._file, 'rb')
            with fd:
                return fd.read()
        except (IOError, OSError) as e:
            raise SourceUnavailable('Failed to read {}: {}'.format(
                self._file, e))

    def get_structure(self):
        """Return the dataset structure: an empty dataset with the columns.

        Determining the structure requires reading the whole entry; once
        known, it is returned without reading again.
        """
        if self._structure is None:
            self._structure = self._read().structure()
            self.state = STRUCTURE_KNOWN
            logger.debug('Loader state: %s', self.state)
        return self._structure.structure()

    def get_data_set(self):
        """Read the selected entry and return it as a TabularDataset."""
        dataset = self._read()
        self._structure = dataset.structure()
        self.state = DATA_READ
        logger.debug('Loader state: %s', self.state)
        return dataset

    def _read(self):
        if self._retrieval == INCREMENTAL:
            raise IncompatibleMode('Cannot mix getting instances in both '
                                   'incremental and batch modes')
        self._retrieval = BATCH

        entries = loadmat(BytesIO(self._read_source()))
        name, array = select_entry(entries, self.entry_name,
                                   self._file or self._source_name)
        return convert(array, name or self._source_name,
                       self.max_nominal_values)

    def next_row(self, structure=None):
        """Incremental loading is not supported, this always raises
        ``IncompatibleMode``.
        """
        if self._retrieval == BATCH:
            raise IncompatibleMode('Cannot mix getting instances in both '
                                   'incremental and batch modes')
        self._retrieval = INCREMENTAL
        raise IncompatibleMode('Incremental loading not supported!')


class MatSaver(object):
    """Writes a tabular dataset to a MAT-file.

    The column names and type tags are stored in a 2 x C cell array under
    entry_name_header, the values in an R x C cell array under
    entry_name_data. With data_under_header the data entry is stored under
    entry_name_header as well, the layout written by earlier versions.
    """

    def __init__(self, entry_name_header=DEFAULT_ENTRY_NAME_HEADER,
                 entry_name_data=DEFAULT_ENTRY_NAME_DATA,
                 data_under_header=False):
        self.entry_name_header = entry_name_header
        self.entry_name_data = entry_name_data
        self.data_under_header = data_under_header
        self._instances = None
        self._destination = None
        self.reset_writer()

    @property
    def instances(self):
        return self._instances

    @property
    def retrieval(self):
        return self._retrieval

    def set_instances(self, dataset):
        self._instances = dataset

    def set_destination(self, destination):
        """Set the file (a path) or stream to write to.

        A path ending in '.gz' is written gzip compressed. A stream is
        written to, but not closed.
        """
        if destination is None:
            raise SourceUnavailable('Destination file object is null!')
        self.reset_writer()
        self._destination = destination

    def reset_writer(self):
        self._retrieval = NONE
        self.state = UNINITIALIZED

    def write_batch(self):
        """Write the dataset set with set_instances to the destination."""
        if self._instances is None or self._instances.num_rows == 0:
            raise NoData('No instances to save')
        if self._retrieval == INCREMENTAL:
            raise IncompatibleMode('Batch and incremental saving cannot be '
                                   'mixed.')
        if self.state == DONE:
            raise IncompatibleMode('Dataset already written, set a new '
                                   'destination first')
        if self._destination is None:
            raise SourceUnavailable('No destination has been specified')

        self._retrieval = BATCH
        self.state = WRITING
        logger.debug('Saver state: %s', self.state)
        try:
            data_name = self.entry_name_header if self.data_under_header \
                else self.entry_name_data
            entries = encode(self._instances, self.entry_name_header,
                             data_name)
            bd = BytesIO()
            write_entries(bd, entries)
            self._commit(bd.getvalue())
        except Exception:
            self.state = UNINITIALIZED
            raise
        self.state = DONE
        logger.debug('Saver state: %s', self.state)

    def _commit(self, data):
        dest = self._destination
        if not isinstance(dest, (str, os.PathLike)):
            dest.write(data)
            dest.flush()
            return

        dest = os.fspath(dest)
        if dest.endswith(FILE_EXTENSION_COMPRESSED):
            data = gzip.compress(data)
        directory = os.path.dirname(os.path.abspath(dest))
        try:
            fd, tmpname = tempfile.mkstemp(
                dir=directory, prefix='.' + os.path.basename(dest),
                suffix='.tmp')
        except (IOError, OSError) as e:
            raise SourceUnavailable('Cannot write to {}: {}'.format(dest, e))
        try:
            with os.fdopen(fd, 'wb') as fp:
                fp.write(data)
            # mkstemp creates the file readable by the owner only; keep the
            # mode of a file being replaced
            try:
                mode = stat.S_IMODE(os.stat(dest).st_mode)
            except FileNotFoundError:
                mode = DEFAULT_FILE_MODE
            os.chmod(tmpname, mode)
            os.replace(tmpname, dest)
        except Exception:
            if os.path.exists(tmpname):
                os.remove(tmpname)
            raise

    def write_incremental(self, row=None):
        """Incremental saving is not supported, this always raises
        ``IncompatibleMode``.
        """
        if self._retrieval == BATCH:
            raise IncompatibleMode('Batch and incremental saving cannot be '
                                   'mixed.')
        self._retrieval = INCREMENTAL
        raise IncompatibleMode('Incremental saving not supported!')
