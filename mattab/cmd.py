"""Command line utility for mattab.

Provides a routine for converting Matlab MAT-files to/from JSON formatted
datasets.

Call

    python -m mattab.cmd -h

to get help with command line usage.
"""

import argparse
import json
import logging
import os
import sys

from mattab import MatLoader, MatSaver, TabularDataset
from mattab.converters import (DEFAULT_ENTRY_NAME, DEFAULT_ENTRY_NAME_DATA,
                               DEFAULT_ENTRY_NAME_HEADER)
from mattab.convert import DEFAULT_MAX_NOMINAL_VALUES
from mattab.errors import MatTabError


def mat_to_json(path, dest, args):
    loader = MatLoader(args.entry_name, args.max_nominal_values)
    loader.set_source(path)
    dataset = loader.get_data_set()
    with open(dest, 'w') as fp:
        json.dump(dataset.to_dict(), fp)


def json_to_mat(path, dest, args):
    with open(path) as fp:
        dataset = TabularDataset.from_dict(json.load(fp))
    saver = MatSaver(args.entry_name_header, args.entry_name_data)
    saver.set_instances(dataset)
    saver.set_destination(dest)
    saver.write_batch()


def destination(path):
    """Return the conversion function and the destination path for path,
    or None if the file extension is not known.
    """
    lower = path.lower()
    if lower.endswith('.mat.gz'):
        return mat_to_json, path[:-len('.mat.gz')] + '.json'
    spl = os.path.splitext(path)
    ext = spl[1].lower()
    if ext == '.mat':
        return mat_to_json, spl[0] + '.json'
    elif ext == '.json':
        return json_to_mat, spl[0] + '.mat'
    return None


def main(argv=None):
    #
    # get arguments and invoke the conversion routines
    #

    parser = argparse.ArgumentParser(
        description='Convert Matlab MAT-files to JSON formatted datasets, '
        'and the other way around.')

    parser.add_argument(
        'file', nargs='+',
        help='path to a Matlab MAT-file (optionally gzip compressed, '
        '.mat.gz) or a JSON dataset file')
    parser.add_argument(
        '-entry-name', default=DEFAULT_ENTRY_NAME,
        help='the entry name to retrieve; first if empty '
        '(default: "%(default)s")')
    parser.add_argument(
        '-max-nominal-values', type=int, default=DEFAULT_MAX_NOMINAL_VALUES,
        help='the maximum number of distinct values a nominal column can '
        'have; beyond that it is a text column. Use -1 to always convert '
        'to nominal, 0 to always convert to text (default: %(default)s)')
    parser.add_argument(
        '-entry-name-header', default=DEFAULT_ENTRY_NAME_HEADER,
        help='the entry name to use for the header (default: %(default)s)')
    parser.add_argument(
        '-entry-name-data', default=DEFAULT_ENTRY_NAME_DATA,
        help='the entry name to use for the data (default: %(default)s)')
    parser.add_argument(
        '--remove-input', action='store_const', const=True,
        default=False, help='remove input file after conversion')
    parser.add_argument(
        '-f', '--force', action='store_const', const=True,
        default=False, help='overwrite existing files when converting')
    parser.add_argument(
        '-v', '--verbose', action='store_const', const=True,
        default=False, help='log the entries found in MAT-files')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s')

    for path in args.file:
        conversion = destination(path)
        if conversion is None:
            print('Unsupported file extension on file: {}'.format(path))
            sys.exit(1)
        convert, dest = conversion
        try:
            if os.path.exists(dest) and not args.force:
                raise MatTabError('File {} already exists.'.format(dest))
            convert(path, dest, args)
            if args.remove_input:
                os.remove(path)
        except (MatTabError, ValueError, KeyError, IOError) as e:
            print('Error: {}'.format(e))
            sys.exit(1)


if __name__ == '__main__':
    main()
