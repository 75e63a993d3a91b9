"""
This module implements various general (low-level) utility methods

"""
import logging
import os
import re
from collections import Counter
from itertools import groupby
from pathlib import Path

import pysam

import readstream as rs
from .errors import ConfigurationError, MissingFileError, MissingReferenceError, MissingIndexError, \
    HeaderReadError, IndexLoadError


# --------------------------------------------------------------
# Commandline and config handling
# --------------------------------------------------------------

def get_config(config, keys, default_value=None, required=False):
    """
    Gets a configuration value from a config dict (e.g., loaded from JSON).
    Keys can be a list of keys (that will be traversed) or a single value.
    If the key is missing and required is True, a ConfigurationError will be raised. Otherwise, the configured
    default value will be returned.

    Examples
    --------
    >>> files = get_config(config, 'sources', required=True)
    >>> merge_type = get_config(config, 'merge/type', default_value='position', required=False)
    """
    if isinstance(keys, str):  # handle single strings
        keys = keys.split("/")
    d = config
    for k in keys:
        if k is None:
            continue  # ignore None keys
        if k not in d:
            if required:
                raise ConfigurationError('Mandatory config path "%s" missing' % " > ".join(keys))
            return default_value
        d = d[k]
    return d


# --------------------------------------------------------------
# Collection helpers
# --------------------------------------------------------------

def check_list(lst, mode="inc1") -> bool:
    """
    Tests whether the (numeric, comparable) items in a list are
    * mode=='inc': increasing (strictly monotonic)
    * mode=='inceq': increasing (monotonic)
    * mode=='inc1': increasing by one
    * mode=='eq': all equal
    """
    if mode == "inc":
        return all(x < y for x, y in zip(lst, lst[1:]))
    elif mode == "inc1":
        return all(x + 1 == y for x, y in zip(lst, lst[1:]))
    elif mode == "inceq":
        return all(x <= y for x, y in zip(lst, lst[1:]))
    elif mode == "eq":
        g = groupby(lst)  # see itertools
        return next(g, True) and not next(g, False)
    return None


# --------------------------------------------------------------
# I/O helpers
# --------------------------------------------------------------

default_file_extensions = {
    "sam": (".sam", ".sam.gz"),
    "bam": (".bam",),
    "cram": (".cram",),
}

#: candidate index file suffixes per format. '{f}' is the data file, '{stem}' the data file w/o extension
default_index_patterns = {
    "sam": ("{f}.csi", "{f}.tbi"),
    "bam": ("{f}.bai", "{f}.csi", "{stem}.bai", "{stem}.csi"),
    "cram": ("{f}.crai", "{stem}.crai"),
}

#: pysam open modes per format
open_modes = {"sam": "r", "bam": "rb", "cram": "rc"}


def guess_file_format(file_name, file_extensions=None):
    """
    Guesses the file format from the file extension
    :param file_name:
    :param file_extensions:
    :return:
    """
    if file_extensions is None:
        file_extensions = default_file_extensions
    if file_name is not None:
        for ff, ext in file_extensions.items():
            if str(file_name).endswith(ext):
                return ff
    return None


def remove_extension(p, remove_gzip=True) -> str:
    """Returns a resolved PosixPath of the passed path and removes the extension. Will also remove '.gz' extensions
    if remove_gzip is True. example remove_extension('a/b/c.txt.gz') -> <pwd>/a/b/c
    """
    p = Path(p).resolve()
    if remove_gzip and ".gz" in p.suffixes:
        p = p.with_suffix("")  # drop '.gz'
    return str(p.with_suffix(""))  # drop ext


def find_index_file(file, file_format=None):
    """ Returns the path of the first existing index file for the passed alignment file or None if none exists """
    file = str(file)
    if file_format is None:
        file_format = guess_file_format(file)
    stem = remove_extension(file)
    for pattern in default_index_patterns.get(file_format, ()):
        candidate = pattern.format(f=file, stem=stem)
        if os.path.exists(candidate):
            return candidate
    return None


def open_alignment_file(file, reference=None, file_format=None) -> pysam.AlignmentFile:
    """
    Opens an indexed SAM/BAM/CRAM file. All preconditions for region iteration are checked and reported by
    the respective ResourceError subclass.

    Parameters
    ----------
    file : str or file path object
    reference : str
        FASTA file, mandatory for CRAM files. A FASTA index (.fai) must exist next to it.
    file_format : str
        'sam', 'bam', 'cram' or None for auto-detection from filename

    Returns
    -------
        file_handle : pysam.AlignmentFile with loaded index

    Raises
    ------
    MissingFileError, MissingReferenceError, MissingIndexError, HeaderReadError, IndexLoadError
    """
    file = str(file)  # convert path to str
    if not os.path.exists(file):
        raise MissingFileError(f"File {file} does not exist", file)
    if file_format is None:  # auto detect via file extension
        file_format = guess_file_format(file)
    if file_format not in open_modes:
        raise HeaderReadError(f"Unsupported alignment file format for file {file}", file)
    if file_format == 'cram':
        if reference is None:
            raise MissingReferenceError(f"Must specify a FASTA reference file path for CRAM file {file}", file)
        reference = str(reference)
        if not os.path.exists(reference):
            raise MissingReferenceError(f"File {reference} does not exist (reference for {file})", file)
        if not os.path.exists(reference + '.fai'):
            raise MissingReferenceError(f"File {reference}.fai does not exist (reference for {file})", file)
    if find_index_file(file, file_format) is None:
        raise MissingIndexError(f"No index found for file {file}", file)
    try:
        fh = pysam.AlignmentFile(file, open_modes[file_format], reference_filename=reference)  # @UndefinedVariable
    except (ValueError, OSError) as e:
        if 'truncated' in str(e):
            raise HeaderReadError(f"File {file} is truncated: {e}", file) from e
        raise HeaderReadError(f"Failed to read the header for file {file}: {e}", file) from e
    if not fh.has_index():
        fh.close()
        raise IndexLoadError(f"Failed to load the index for file {file}", file)
    logging.debug(f"Opened {file_format} file {file}")
    return fh


# --------------------------------------------------------------
# genomics helpers
# --------------------------------------------------------------

def parse_region(region_string) -> (str, int, int):
    """ Parses a region from <chr>:<start>-<end> (1-based, inclusive coordinates as shown in genome browsers) or
    <chr> strings. Returns a (chromosome, start, end) tuple with 0-based start and exclusive end coordinates.
    The end coordinate is None if only a chromosome was passed.

    Examples
    --------
    >>> parse_region('chr1:101-200')
    ('chr1', 100, 200)
    >>> parse_region('chr1:1,000-2,000')
    ('chr1', 999, 2000)
    """
    s = region_string.strip().replace(',', '')  # convenience
    match = re.match(r"^(\S+):(\d+)-(\d+)$", s)
    if match:
        chromosome, start, end = match.groups()
        if int(start) < 1:
            raise ValueError(f"Invalid region {region_string}: coordinates are 1-based")
        return chromosome, int(start) - 1, int(end)
    if s and not re.search(r"\s", s):
        return s, 0, None
    raise ValueError(f"Cannot parse region {region_string}")


def sort_and_index_bam(bam_file):
    """Sort and index a BAM file"""
    try:
        pysam.sort("-o", bam_file + '.tmp.bam', bam_file)  # @UndefinedVariable
        os.replace(bam_file + '.tmp.bam', bam_file)
        pysam.index(bam_file)  # @UndefinedVariable
    except Exception as e:
        logging.error(f"error sorting+indexing bam {bam_file}: {e}")
        raise e


class BamWriter:
    """A simple pass-through writer that appends reads unchanged to a new BAM file.
    The BAM header is copied from the passed template which may be a pysam header, a pysam AlignmentFile or
    any readstream reader.

    Examples
    --------
    >>> with rs.MergeReader(['a.bam', 'b.bam']) as it, BamWriter('out.bam', it) as out:
    >>>     for _, r in it:
    >>>         out.write_record(r)
    """

    def __init__(self, out_file_bam: str, template, sort_and_index=False):
        if isinstance(template, (rs.SourceReader, rs.MergeReader)):
            template = template.header
        elif isinstance(template, pysam.AlignmentFile):  # @UndefinedVariable
            template = template.header
        out_file_bam = str(out_file_bam)
        if not os.path.isdir(Path(out_file_bam).parent.absolute()):
            os.makedirs(Path(out_file_bam).parent.absolute())
        self.samout = pysam.AlignmentFile(out_file_bam, "wb", header=template)  # @UndefinedVariable
        self.out_file_bam = out_file_bam
        self.sort_and_index = sort_and_index
        self._stats = Counter()
        logging.debug(f"Writing to {out_file_bam}")

    @property
    def stats(self):
        return self._stats

    def write_record(self, record) -> bool:
        """Appends the passed record (AlignmentRecord or pysam.AlignedSegment). Returns False if the writer
        was closed already."""
        if self.samout is None:
            return False
        read = record.read if isinstance(record, rs.AlignmentRecord) else record
        self.samout.write(read)
        self._stats['reads'] += 1
        return True

    def __enter__(self):
        return self

    def __exit__(self, extype, value, traceback):
        self.close()

    def close(self):
        if self.samout is None:
            return
        self.samout.close()
        self.samout = None
        if self.sort_and_index:
            sort_and_index_bam(self.out_file_bam)
