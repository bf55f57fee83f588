import unittest
import gzip
import json
import math
import os
import pathlib
import stat
import struct
import tempfile
import zlib

from io import BytesIO

import mattab
from mattab import (MatLoader, MatSaver, TabularDataset, Column,
                    NUMERIC, NOMINAL, STRING,
                    CellArray, CharArray, UnsupportedArray,
                    new_cell, new_matrix, new_scalar, new_string)
from mattab import cmd
from mattab.convert import (classify_cell, convert, encode, extract_grid,
                            profile_column, select_entry)
from mattab.converters import DATA_READ, STRUCTURE_KNOWN, UNINITIALIZED, \
    DONE
from mattab.errors import (EntryNotFound, IncompatibleMode, LabelLookupError,
                           NoData, ParseError, SourceUnavailable, TypeMismatch,
                           UnsupportedArrayKind, UnsupportedDimensionality)
from mattab.savemat import write_entries


def matbytes(entries):
    """Return the bytes of a MAT-file holding the (name, array) entries."""
    bd = BytesIO()
    write_entries(bd, entries)
    return bd.getvalue()


def load(entries, **kwargs):
    loader = MatLoader(**kwargs)
    loader.set_source(BytesIO(matbytes(entries)))
    return loader.get_data_set()


def strings_column(values):
    return CellArray((len(values), 1), [new_string(s) for s in values])


def colors():
    return strings_column(['red', 'blue', 'red', 'green'])


def iris():
    dataset = TabularDataset('iris', [
        Column('sepal', NUMERIC),
        Column('class', NOMINAL, ['setosa', 'virginica']),
        Column('note', STRING)])
    dataset.add_row([5.1, 'setosa', 'first'])
    dataset.add_row([4.9, 'virginica', 'second'])
    dataset.add_row([None, 'setosa', 'third'])
    return dataset


#
# Hand made MAT-files, for reading data not written by mattab
#

def element(endian, mtpn, payload):
    pad = b'\0' * (-len(payload) % 8)
    return struct.pack(endian + 'II', mtpn, len(payload)) + payload + pad


def matrix_element(endian, mclass, dims, name, *parts):
    body = (element(endian, 6, struct.pack(endian + 'II', mclass, 0)) +
            element(endian, 5, struct.pack(
                endian + '{}i'.format(len(dims)), *dims)) +
            element(endian, 1, name.encode('latin1')) +
            b''.join(parts))
    return struct.pack(endian + 'II', 14, len(body)) + body


def handmade_header(endian='<'):
    return b'MATLAB 5.0 MAT-file, test'.ljust(116) + b' ' * 8 + \
        struct.pack(endian + 'H', 0x0100) + \
        (b'IM' if endian == '<' else b'MI')


def handmade_file(endian='<'):
    header = handmade_header(endian)
    chars = matrix_element(endian, 4, (1, 2), '',
                           element(endian, 4, struct.pack(
                               endian + '2H', ord('h'), ord('i'))))
    empty = struct.pack(endian + 'II', 14, 0)
    cell = matrix_element(endian, 1, (1, 2), 'c', empty, chars)
    # a double matrix stored as uint8 values
    numbers = matrix_element(endian, 6, (1, 2), 'm',
                             element(endian, 2, b'\x01\x02'))
    return header + cell + numbers


class TestMatFiles(unittest.TestCase):

    def test_save_load_entries(self):
        """Test writing arrays to mat files, and reading them again"""
        entries = [
            ('matrix', new_matrix((2, 3), [1, 2, 3, 4, 5, 6])),
            ('scalar', new_scalar(-0.5)),
            ('empty', new_matrix((0, 0), [])),
            ('text', new_string('hello')),
            ('unicode', new_string(u'héllo wörld')),
            ('chars', CharArray((2, 3), 'adbecf')),
            ('cube', new_matrix((2, 2, 2), range(8))),
            ('cell', CellArray((2, 2), [new_string('a'), new_scalar(1),
                                        new_string(''), new_cell(1, 1)])),
        ]
        for name, array in entries:
            with self.subTest(msg=name):
                self.assertEqual(mattab.loadmat(BytesIO(matbytes(
                    [(name, array)]))), [(name, array)])

    def test_save_load_file(self):
        """Test writing a mat file, and reading it again, using a filename"""
        entries = [('a', new_scalar(1)), ('b', new_string('x'))]
        with tempfile.TemporaryDirectory() as tmpdir:
            filename = os.path.join(tmpdir, 'test.mat')
            mattab.savemat(filename, entries)
            self.assertEqual(mattab.loadmat(filename), entries)

    def test_duplicate_names(self):
        entries = [('x', new_scalar(1)), ('x', new_scalar(2))]
        self.assertEqual(mattab.loadmat(BytesIO(matbytes(entries))),
                         entries)

    def test_name_too_long(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            filename = os.path.join(tmpdir, 'test.mat')
            with self.assertRaises(ValueError):
                mattab.savemat(filename, {'x' * 32: new_scalar(1)})
            self.assertFalse(os.path.exists(filename))

    def test_read_handmade(self):
        """Test reading uncompressed entries, uint16 chars, empty cells
        and numbers stored as integers, in both byte orders"""
        for endian in ('<', '>'):
            with self.subTest(endian=endian):
                entries = mattab.loadmat(BytesIO(handmade_file(endian)))
                self.assertEqual(entries, [
                    ('c', CellArray((1, 2), [new_matrix((0, 0), []),
                                             CharArray((1, 2), 'hi')])),
                    ('m', new_matrix((1, 2), [1.0, 2.0]))])

    def test_not_a_mat_file(self):
        for data in (b'', b'not a mat file', b'\0' * 200):
            with self.subTest(data=data[:20]):
                with self.assertRaises(ParseError):
                    mattab.loadmat(BytesIO(data))

    def test_truncated_file(self):
        data = matbytes([('m', new_matrix((1, 3), [1, 2, 3]))])
        with self.assertRaises(ParseError):
            mattab.loadmat(BytesIO(data[:-5]))

    def test_compressed_too_short(self):
        """Test compressed data holding less than a variable tag"""
        data = handmade_header() + element('<', 15, zlib.compress(b'\x0e\0\0'))
        with self.assertRaises(ParseError):
            mattab.loadmat(BytesIO(data))

    def test_surrogate_pairs(self):
        """Test text outside the Basic Multilingual Plane"""
        array = new_string('ok \U0001F600')
        self.assertEqual(array.dims, (1, 5))
        entries = mattab.loadmat(BytesIO(matbytes([('s', array)])))
        self.assertEqual(entries, [('s', array)])
        self.assertEqual(entries[0][1].as_string(), 'ok \U0001F600')

    def test_read_utf16(self):
        for endian, codec in (('<', 'utf-16-le'), ('>', 'utf-16-be')):
            with self.subTest(endian=endian):
                chars = matrix_element(
                    endian, 4, (1, 3), 's',
                    element(endian, 17, 'a\U0001F600'.encode(codec)))
                entries = mattab.loadmat(
                    BytesIO(handmade_header(endian) + chars))
                self.assertEqual(entries[0][1].dims, (1, 3))
                self.assertEqual(entries[0][1].as_string(), 'a\U0001F600')


class TestClassification(unittest.TestCase):

    def test_classify_cell(self):
        cases = [
            (new_scalar(3), 3.0),
            (new_string('3.5'), '3.5'),
            (new_string('red'), 'red'),
            (new_matrix((0, 0), []), '[]'),
            (new_matrix((1, 2), [1, 2]), '[1.0 2.0]'),
            (new_cell(1, 1), '{[]}'),
        ]
        for value, expected in cases:
            with self.subTest(value=value):
                self.assertEqual(classify_cell(value), expected)

    def test_classify_nan(self):
        self.assertTrue(math.isnan(classify_cell(new_scalar(float('nan')))))

    def test_profile_column(self):
        texts = ['red', 'blue', 'red', 'green']
        cases = [
            ([1.0, 2.0], 25, (NUMERIC, None)),
            ([1.0, 2.0], 0, (NUMERIC, None)),
            ([], 0, (NUMERIC, None)),
            (texts, 25, (NOMINAL, ('blue', 'green', 'red'))),
            (texts, -1, (NOMINAL, ('blue', 'green', 'red'))),
            (texts, 3, (NOMINAL, ('blue', 'green', 'red'))),
            (texts, 2, (STRING, None)),
            (texts, 0, (STRING, None)),
            ([1.0, 'a', 1.0], 25, (NOMINAL, ('1.0', 'a'))),
        ]
        for values, threshold, expected in cases:
            with self.subTest(values=values, threshold=threshold):
                self.assertEqual(profile_column(values, threshold), expected)

    def test_extract_grid(self):
        self.assertEqual(extract_grid(CharArray((2, 3), 'adbecf')),
                         (('a', 'b', 'c'), ('d', 'e', 'f')))
        self.assertEqual(
            extract_grid(CellArray((1, 2), [new_scalar(1),
                                            new_string('x')])),
            ((1.0, 'x'),))

    def test_unsupported(self):
        with self.assertRaises(UnsupportedArrayKind):
            convert(UnsupportedArray((1, 1), 'mxSTRUCT_CLASS'), 'x')
        with self.assertRaises(UnsupportedDimensionality):
            convert(new_matrix((1, 2, 2), [1, 2, 3, 4]), 'x')

    def test_select_entry(self):
        entries = [('a', new_scalar(1)), ('b', new_scalar(2)),
                   ('b', new_scalar(3))]
        self.assertEqual(select_entry(entries, ''), entries[0])
        self.assertEqual(select_entry(entries, 'b'), entries[2])
        with self.assertRaises(EntryNotFound):
            select_entry(entries, 'c')
        with self.assertRaises(EntryNotFound):
            select_entry([], '')

    def test_select_entry_logs(self):
        with self.assertLogs('mattab.convert', level='INFO') as cm:
            select_entry([('a', new_scalar(1)), ('b', new_scalar(2))], 'b',
                         'test.mat')
        self.assertEqual(cm.output, [
            'INFO:mattab.convert:Entries in: test.mat',
            'INFO:mattab.convert:1: a',
            'INFO:mattab.convert:2: b'])


class TestLoader(unittest.TestCase):

    def test_numeric_matrix(self):
        dataset = load([('m', new_matrix((3, 2), [1, 3, 5, 2, 4, 6]))])
        self.assertEqual(dataset.name, 'm')
        self.assertEqual(list(dataset.columns), [Column('col-1', NUMERIC),
                                                 Column('col-2', NUMERIC)])
        self.assertEqual(dataset.rows, [[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])

    def test_nominal_column(self):
        dataset = load([('colors', colors())])
        self.assertEqual(list(dataset.columns), [
            Column('col-1', NOMINAL, ['blue', 'green', 'red'])])
        self.assertEqual(dataset.rows, [[2], [0], [2], [1]])

    def test_thresholds(self):
        cases = [(-1, NOMINAL), (0, STRING), (2, STRING), (3, NOMINAL),
                 (25, NOMINAL)]
        for threshold, kind in cases:
            with self.subTest(threshold=threshold):
                dataset = load([('colors', colors())],
                               max_nominal_values=threshold)
                self.assertEqual(dataset.columns[0].kind, kind)
                self.assertEqual(list(dataset.values()),
                                 [['red'], ['blue'], ['red'], ['green']])

    def test_string_column(self):
        dataset = load([('colors', colors())], max_nominal_values=2)
        self.assertEqual(list(dataset.columns), [Column('col-1', STRING)])
        self.assertEqual(len(dataset.strings), 3)
        self.assertEqual(dataset.rows[0], dataset.rows[2])

    def test_numbers_in_cells(self):
        cell = CellArray((2, 2), [new_scalar(1), new_scalar(2),
                                  new_string('a'), new_scalar(3)])
        dataset = load([('c', cell)])
        self.assertEqual(list(dataset.columns), [
            Column('col-1', NUMERIC), Column('col-2', NOMINAL, ['3.0', 'a'])])
        self.assertEqual(list(dataset.values()), [[1.0, 'a'], [2.0, '3.0']])

    def test_char_array(self):
        dataset = load([('chars', CharArray((2, 3), 'adbecf'))])
        self.assertEqual([c.labels for c in dataset.columns],
                         [('a', 'd'), ('b', 'e'), ('c', 'f')])
        self.assertEqual(dataset.rows, [[0, 0, 0], [1, 1, 1]])

    def test_no_rows(self):
        dataset = load([('m', new_matrix((0, 3), []))])
        self.assertEqual([c.kind for c in dataset.columns], [NUMERIC] * 3)
        self.assertEqual(dataset.num_rows, 0)

    def test_entry_selection(self):
        entries = [('first', new_scalar(1)), ('data', new_scalar(2)),
                   ('data', new_scalar(3))]
        self.assertEqual(load(entries).rows, [[1.0]])
        self.assertEqual(load(entries, entry_name='data').rows, [[3.0]])

    def test_entry_not_found(self):
        with self.assertRaises(EntryNotFound):
            load([('data', new_scalar(1))], entry_name='missing')
        with self.assertRaises(EntryNotFound):
            load([])

    def test_three_dimensions(self):
        with self.assertRaises(UnsupportedDimensionality):
            load([('cube', new_matrix((2, 2, 2), range(8)))])

    def test_idempotent(self):
        loader = MatLoader(max_nominal_values=3)
        loader.set_source(BytesIO(matbytes([('colors', colors())])))
        first = loader.get_data_set()
        second = loader.get_data_set()
        self.assertEqual(first, second)
        self.assertEqual(first.rows, second.rows)
        self.assertEqual(loader.state, DATA_READ)

    def test_structure(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            filename = os.path.join(tmpdir, 'colors.mat')
            mattab.savemat(filename, [('colors', colors())])
            loader = MatLoader()
            self.assertEqual(loader.state, UNINITIALIZED)
            loader.set_source(filename)
            structure = loader.get_structure()
            self.assertEqual(loader.state, STRUCTURE_KNOWN)
            self.assertEqual(structure.num_rows, 0)
            self.assertEqual(list(structure.columns), [
                Column('col-1', NOMINAL, ['blue', 'green', 'red'])])
            # the structure is not read again
            os.remove(filename)
            self.assertEqual(loader.get_structure().columns,
                             structure.columns)
            with self.assertRaises(SourceUnavailable):
                loader.get_data_set()

    def test_gzip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            filename = os.path.join(tmpdir, 'colors.mat.gz')
            with gzip.open(filename, 'wb') as fp:
                fp.write(matbytes([('colors', colors())]))
            loader = MatLoader()
            loader.set_source(filename)
            self.assertEqual(loader.get_data_set().rows,
                             [[2], [0], [2], [1]])

    def test_path_source(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / 'colors.mat'
            mattab.savemat(path, [('colors', colors())])
            loader = MatLoader()
            loader.set_source(path)
            self.assertEqual(loader.get_data_set().rows,
                             [[2], [0], [2], [1]])
            with self.assertRaises(SourceUnavailable):
                loader.set_source(path.with_name('missing.mat'))

    def test_handmade(self):
        loader = MatLoader(entry_name='c')
        loader.set_source(BytesIO(handmade_file()))
        dataset = loader.get_data_set()
        self.assertEqual(list(dataset.values()), [['[]', 'hi']])

    def test_source_unavailable(self):
        loader = MatLoader()
        with self.assertRaises(SourceUnavailable):
            loader.set_source(None)
        with self.assertRaises(SourceUnavailable):
            loader.set_source('/no/such/file.mat')
        with self.assertRaises(SourceUnavailable):
            loader.get_data_set()

    def test_parse_error(self):
        loader = MatLoader()
        loader.set_source(BytesIO(b'not a mat file'))
        with self.assertRaises(ParseError):
            loader.get_data_set()

    def test_incremental(self):
        loader = MatLoader()
        loader.set_source(BytesIO(matbytes([('m', new_scalar(1))])))
        with self.assertRaises(IncompatibleMode):
            loader.next_row()
        with self.assertRaises(IncompatibleMode):
            loader.get_data_set()
        loader.reset()
        loader.get_data_set()
        with self.assertRaises(IncompatibleMode):
            loader.next_row()

    def test_max_nominal_values(self):
        self.assertEqual(MatLoader(max_nominal_values=-5).max_nominal_values,
                         -1)


class TestDataset(unittest.TestCase):

    def test_values(self):
        dataset = iris()
        self.assertEqual(dataset.rows[:2], [[5.1, 0, 0], [4.9, 1, 1]])
        self.assertEqual(dataset.value(1, 1), 'virginica')
        self.assertEqual(dataset.value(2, 2), 'third')
        self.assertTrue(dataset.is_missing(2, 0))

    def test_invalid_values(self):
        dataset = iris()
        with self.assertRaises(TypeMismatch):
            dataset.add_row(['x', 'setosa', 'n'])
        with self.assertRaises(LabelLookupError):
            dataset.add_row([1.0, 'versicolor', 'n'])
        with self.assertRaises(ValueError):
            dataset.add_row([1.0])

    def test_dict(self):
        dataset = iris()
        d = json.loads(json.dumps(dataset.to_dict()))
        self.assertEqual(d['rows'][2], [None, 'setosa', 'third'])
        self.assertEqual(TabularDataset.from_dict(d), dataset)

    def test_dict_invalid(self):
        for d in ([], 'iris', {'rows': []}):
            with self.subTest(d=d):
                with self.assertRaises(ValueError):
                    TabularDataset.from_dict(d)


class TestSaver(unittest.TestCase):

    def save(self, dataset, **kwargs):
        saver = MatSaver(**kwargs)
        saver.set_instances(dataset)
        bd = BytesIO()
        saver.set_destination(bd)
        saver.write_batch()
        self.assertEqual(saver.state, DONE)
        return bd.getvalue()

    def test_layout(self):
        entries = mattab.loadmat(BytesIO(self.save(iris())))
        self.assertEqual([name for name, array in entries],
                         ['header', 'data'])
        header = entries[0][1]
        self.assertEqual(header.dims, (2, 3))
        self.assertEqual([header.get(0, i).as_string() for i in range(3)],
                         ['sepal', 'class', 'note'])
        self.assertEqual([header.get(1, i).as_string() for i in range(3)],
                         ['NUM', 'STR', 'STR'])
        data = entries[1][1]
        self.assertEqual(data.dims, (3, 3))
        self.assertEqual(data.get(0, 0), new_scalar(5.1))
        self.assertEqual(data.get(1, 1), new_string('virginica'))
        self.assertEqual(data.get(1, 2), new_string('second'))
        self.assertTrue(math.isnan(data.get(2, 0).data[0]))

    def test_entry_names(self):
        entries = mattab.loadmat(BytesIO(self.save(
            iris(), entry_name_header='h', entry_name_data='d')))
        self.assertEqual([name for name, array in entries], ['h', 'd'])
        entries = mattab.loadmat(BytesIO(self.save(
            iris(), data_under_header=True)))
        self.assertEqual([name for name, array in entries],
                         ['header', 'header'])

    def test_round_trip(self):
        data = self.save(iris())
        for threshold, kinds in ((25, [NUMERIC, NOMINAL, NOMINAL]),
                                 (0, [NUMERIC, STRING, STRING])):
            with self.subTest(threshold=threshold):
                loader = MatLoader('data', threshold)
                loader.set_source(BytesIO(data))
                dataset = loader.get_data_set()
                self.assertEqual([c.kind for c in dataset.columns], kinds)
                self.assertEqual(dataset.num_rows, 3)
                self.assertEqual(dataset.value(0, 0), 5.1)
                self.assertEqual(dataset.value(1, 0), 4.9)
                self.assertTrue(dataset.is_missing(2, 0))
                self.assertEqual([r[1:] for r in dataset.values()],
                                 [['setosa', 'first'],
                                  ['virginica', 'second'],
                                  ['setosa', 'third']])

    def test_non_bmp_text(self):
        dataset = TabularDataset('notes', [Column('note', STRING)])
        dataset.add_row(['ok \U0001F600'])
        dataset.add_row(['été'])
        loader = MatLoader('data', 0)
        loader.set_source(BytesIO(self.save(dataset)))
        self.assertEqual(list(loader.get_data_set().values()),
                         [['ok \U0001F600'], ['été']])

    def test_legacy_layout_round_trip(self):
        loader = MatLoader('header')
        loader.set_source(BytesIO(self.save(iris(), data_under_header=True)))
        self.assertEqual(loader.get_data_set().num_rows, 3)

    def test_no_data(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            filename = os.path.join(tmpdir, 'empty.mat')
            for dataset in (None, iris().structure()):
                with self.subTest(dataset=dataset):
                    saver = MatSaver()
                    saver.set_instances(dataset)
                    saver.set_destination(filename)
                    with self.assertRaises(NoData):
                        saver.write_batch()
                    self.assertFalse(os.path.exists(filename))
            with self.assertRaises(NoData):
                encode(iris().structure())

    def test_incremental(self):
        saver = MatSaver()
        saver.set_instances(iris())
        saver.set_destination(BytesIO())
        with self.assertRaises(IncompatibleMode):
            saver.write_incremental()
        with self.assertRaises(IncompatibleMode):
            saver.write_batch()

    def test_write_twice(self):
        saver = MatSaver()
        saver.set_instances(iris())
        saver.set_destination(BytesIO())
        saver.write_batch()
        with self.assertRaises(IncompatibleMode):
            saver.write_batch()
        with self.assertRaises(IncompatibleMode):
            saver.write_incremental()
        saver.set_destination(BytesIO())
        saver.write_batch()

    def test_file(self):
        for name in ('iris.mat', 'iris.mat.gz'):
            with self.subTest(name=name):
                with tempfile.TemporaryDirectory() as tmpdir:
                    filename = os.path.join(tmpdir, name)
                    saver = MatSaver()
                    saver.set_instances(iris())
                    saver.set_destination(filename)
                    saver.write_batch()
                    self.assertEqual(os.listdir(tmpdir), [name])
                    with open(filename, 'rb') as fp:
                        magic = fp.read(2)
                    self.assertEqual(magic == b'\x1f\x8b',
                                     name.endswith('.gz'))
                    loader = MatLoader('data')
                    loader.set_source(filename)
                    self.assertEqual(loader.get_data_set().num_rows, 3)

    def test_path_destination(self):
        for name in ('iris.mat', 'iris.mat.gz'):
            with self.subTest(name=name):
                with tempfile.TemporaryDirectory() as tmpdir:
                    path = pathlib.Path(tmpdir) / name
                    saver = MatSaver()
                    saver.set_instances(iris())
                    saver.set_destination(path)
                    saver.write_batch()
                    self.assertEqual(os.listdir(tmpdir), [name])
                    loader = MatLoader('data')
                    loader.set_source(path)
                    self.assertEqual(loader.get_data_set().num_rows, 3)

    @unittest.skipIf(os.name == 'nt', 'POSIX file modes')
    def test_file_mode(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            filename = os.path.join(tmpdir, 'iris.mat')
            saver = MatSaver()
            saver.set_instances(iris())
            saver.set_destination(filename)
            saver.write_batch()
            self.assertEqual(stat.S_IMODE(os.stat(filename).st_mode), 0o644)
            # a replaced file keeps its mode
            os.chmod(filename, 0o600)
            saver.set_destination(filename)
            saver.write_batch()
            self.assertEqual(stat.S_IMODE(os.stat(filename).st_mode), 0o600)

    def test_unwritable(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            filename = os.path.join(tmpdir, 'missing', 'iris.mat')
            saver = MatSaver()
            saver.set_instances(iris())
            saver.set_destination(filename)
            with self.assertRaises(SourceUnavailable):
                saver.write_batch()
            self.assertEqual(os.listdir(tmpdir), [])
            self.assertEqual(saver.state, UNINITIALIZED)
        with self.assertRaises(SourceUnavailable):
            saver.set_destination(None)


class TestCommandLine(unittest.TestCase):

    def test_mat_to_json_and_back(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            matfile = os.path.join(tmpdir, 'colors.mat')
            jsonfile = os.path.join(tmpdir, 'colors.json')
            mattab.savemat(matfile, [('colors', colors())])

            cmd.main(['-max-nominal-values', '2', matfile])
            with open(jsonfile) as fp:
                d = json.load(fp)
            self.assertEqual(d, {
                'name': 'colors',
                'columns': [{'name': 'col-1', 'type': 'string'}],
                'rows': [['red'], ['blue'], ['red'], ['green']]})

            cmd.main(['-f', '--remove-input', '-entry-name-data', 'values',
                      jsonfile])
            self.assertFalse(os.path.exists(jsonfile))
            self.assertEqual([name for name, array in mattab.loadmat(matfile)],
                             ['header', 'values'])

    def test_errors(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            matfile = os.path.join(tmpdir, 'colors.mat')
            mattab.savemat(matfile, [('colors', colors())])
            cases = [
                [os.path.join(tmpdir, 'colors.txt')],
                ['-f', '-entry-name', 'missing', matfile],
            ]
            # not a JSON document
            open(os.path.join(tmpdir, 'other.json'), 'w').close()
            cases.append([os.path.join(tmpdir, 'other.json')])
            # a JSON document that is not a dataset
            with open(os.path.join(tmpdir, 'list.json'), 'w') as fp:
                json.dump([], fp)
            cases.append([os.path.join(tmpdir, 'list.json')])
            # destination exists, and no --force
            cases.append([matfile])
            open(os.path.join(tmpdir, 'colors.json'), 'w').close()
            for argv in cases:
                with self.subTest(argv=argv):
                    with self.assertRaises(SystemExit) as cm:
                        cmd.main(argv)
                    self.assertEqual(cm.exception.code, 1)


if __name__ == '__main__':
    unittest.main()
