"""
    Readstream is a python library for streaming reads from one or more coordinate-sorted and indexed
    SAM/BAM/CRAM files as a single, ordered stream.

    A `SourceReader` wraps one indexed alignment file (opened via pysam) and supports repeated region queries. The
    first read of each queried region is cached together with its file offset: subsequent queries on the same
    chromosome that start at or after the cached read are answered by rewinding to this offset and scanning
    sequentially, without another lookup in the (.bai/.csi/.crai) index.

    A `MergeReader` combines several SourceReaders with identical sequence dictionaries. Reads are emitted either
    in global (reference id, start) order using one lookahead read per source (`MergeType.POSITION`) or strictly
    source by source (`MergeType.FILE_ORDER`).

    Regions use 0-based, half-open coordinates throughout (as pysam/htslib do). Region strings such as
    'chr1:101-200' are 1-based and inclusive, see `parse_region()`.

    Examples
    --------
    >>> with MergeReader(['a.bam', 'b.bam']) as it:
    >>>     if it.set_region('chr1', 1000, 2000):
    >>>         for source_index, read in it:
    >>>             print(source_index, read.name, read.position)
"""
import copy
import logging
import sys
import warnings
from collections import Counter, abc, deque
from os import PathLike
from typing import NamedTuple, List

import pysam
from sortedcontainers import SortedList

from ._version import __version__
from .constants import *
from .errors import *
from .utils import *

logging.basicConfig(stream=sys.stderr, level=logging.INFO)


# ------------------------------------------------------------------------
# Reference sequences and read groups
# ------------------------------------------------------------------------
class SequenceDictionary(abc.Mapping[str, int]):
    """
        Named mapping of the reference sequences (contigs) of an alignment file to their lengths.

        The reference id of a sequence is its (0-based) position in the file header. Dictionaries are immutable
        after construction. Two dictionaries are compatible iff they list the same (name, length) pairs in the
        same order; only then are reference ids comparable across files (see `compatible()`).
        Note that the name of a SequenceDictionary is not compared.
    """

    def __init__(self, d, name=None):
        self.d = dict(d)
        self.name = name
        self._ids = {chrom: i for i, chrom in enumerate(self.d)}

    def __getitem__(self, key):
        return self.d[key]

    def __len__(self):
        return len(self.d)

    def __iter__(self):
        return iter(self.d)

    def __repr__(self):
        return f"SequenceDictionary (size: {len(self.d)}): {list(self.d.keys())}, name: {self.name}"

    @property
    def names(self) -> List[str]:
        return list(self.d.keys())

    @property
    def lengths(self) -> List[int]:
        return list(self.d.values())

    def resolve(self, chrom):
        """ Reference id of the passed sequence name (exact, case-sensitive match) or None if not found """
        return self._ids.get(chrom)

    index = resolve

    def ref_name(self, ref_id) -> str:
        """ Name of the sequence with the passed id; '*' for unmapped reads (-1) """
        if ref_id == -1:
            return '*'
        if 0 <= ref_id < len(self.d):
            return self.names[ref_id]
        raise IndexError(f"Invalid reference id {ref_id} (dictionary has {len(self.d)} sequences)")

    def ref_length(self, ref_id) -> int:
        if 0 <= ref_id < len(self.d):
            return self.lengths[ref_id]
        raise IndexError(f"Invalid reference id {ref_id} (dictionary has {len(self.d)} sequences)")

    def compatible(self, other) -> bool:
        """ True if both dictionaries list the same (name, length) pairs in the same order """
        return list(self.d.items()) == list(other.d.items())

    def check_compatible(self, other, name=None, other_name=None):
        """
            Raises an IncompatibleReferencesError that describes the first difference between this and the
            other dictionary, if any.

            Parameters
            ----------
            other : SequenceDictionary
            name, other_name : str
                names of the compared sources (e.g., file paths) used in the error message. Default: the
                dictionary names.
        """
        if self.compatible(other):
            return
        name = self.name if name is None else name
        other_name = other.name if other_name is None else other_name
        if len(self) != len(other):
            diff = f"{len(self)} != {len(other)} sequences"
        else:
            i, ((c1, l1), (c2, l2)) = next((i, (a, b)) for i, (a, b) in
                                           enumerate(zip(self.d.items(), other.d.items())) if a != b)
            diff = f"sequence names differ at index {i} ({c1} != {c2})" if c1 != c2 else \
                f"lengths of sequence {c1} differ ({l1} != {l2})"
        raise IncompatibleReferencesError(f"Incompatible sequence dictionaries in {name} and {other_name}: {diff}")

    @staticmethod
    def load(fh, name=None):
        """ Extracts sequence names, order and lengths from a pysam AlignmentFile or AlignmentHeader (or a file
        path which will be opened and closed again).

        Raises
        ------
        NotImplementedError
            if input type is not supported
        """
        if isinstance(fh, (str, PathLike)):
            with pysam.AlignmentFile(str(fh)) as f:  # @UndefinedVariable
                return SequenceDictionary.load(f, name)
        if isinstance(fh, pysam.AlignmentFile):  # @UndefinedVariable
            name = fh.filename.decode() if (name is None and isinstance(fh.filename, bytes)) else name
            fh = fh.header
        if isinstance(fh, pysam.AlignmentHeader):  # @UndefinedVariable
            return SequenceDictionary(zip(fh.references, fh.lengths), name=name)
        raise NotImplementedError(f"Unknown input object type {type(fh)}")


class ReadGroup(NamedTuple):
    """ A read group (@RG) header line. Missing fields are None. """
    id: str = None
    sample: str = None
    library: str = None

    def has_id(self):
        return bool(self.id)

    def has_sample(self):
        return bool(self.sample)

    def has_library(self):
        return bool(self.library)

    @staticmethod
    def load(header) -> list:
        """ Returns the read groups of the passed pysam header in file order """
        return [ReadGroup(rg.get('ID'), rg.get('SM'), rg.get('LB')) for rg in header.to_dict().get('RG', [])]


# ------------------------------------------------------------------------
# Regions
# ------------------------------------------------------------------------
class Region(NamedTuple):
    """
        A resolved genomic region: 0-based start, exclusive end and the reference id of the chromosome in the
        dictionary it was resolved against. Readers use None instead of a Region for whole-file iteration.

        Regions select reads that overlap [start, end). Reads without aligned bases (no CIGAR) are treated as
        covering one base.
    """
    chromosome: str
    ref_id: int
    start: int
    end: int

    def __repr__(self):
        return f"{self.chromosome}:{self.start}-{self.end}"

    @staticmethod
    def resolve(refdict, chromosome, start=0, end=None):
        """ Resolves the passed coordinates against a SequenceDictionary. Returns None for unknown
        chromosomes or invalid coordinates. If end is None, the region extends to the end of the chromosome."""
        ref_id = refdict.resolve(chromosome)
        if ref_id is None:
            return None
        if end is None:
            end = refdict.ref_length(ref_id)
        if start < 0 or start > end:
            return None
        return Region(chromosome, ref_id, start, end)

    def is_past(self, record) -> bool:
        """ True if the passed record is located after this region in a coordinate-sorted file """
        return record.ref_id != self.ref_id or record.position >= self.end

    def overlaps(self, record) -> bool:
        return record.ref_id == self.ref_id and record.position < self.end and \
            max(record.end_position, record.position + 1) > self.start


# ------------------------------------------------------------------------
# Alignment records
# ------------------------------------------------------------------------
class CigarOp(NamedTuple):
    """ A CIGAR operation, e.g., CigarOp('M', 76) """
    type: str
    length: int


def _flag_property(flag, doc, inverse=False):
    """ Creates a read/write property for a single BAM flag bit. Inverse properties are True if the bit is unset """

    def fget(self):
        return ((self.read.flag & flag) != 0) != inverse

    def fset(self, value):
        if bool(value) != inverse:
            self.read.flag |= flag
        else:
            self.read.flag &= ~flag

    return property(fget, fset, doc=doc)


class AlignmentRecord:
    """
        A single alignment read from a source file.

        Wraps a pysam.AlignedSegment (accessible via the `read` attribute) and adds lazily built, cached copies
        of the query bases, qualities and CIGAR operations. These are extracted on first access (see `built`)
        and returned from the cache afterwards.

        Copies of a record (`copy()`) duplicate the wrapped segment. Readers hand out copies of reads they
        keep cached internally, so callers may modify returned records.

        Attributes
        ----------
        read : pysam.AlignedSegment
            the wrapped read
        filename : str
            path of the file this record was read from
        built : bool
            True once bases, qualities and CIGAR operations were extracted
    """

    __slots__ = ('read', 'filename', 'built', '_bases', '_qualities', '_cigar_ops')

    def __init__(self, read: pysam.AlignedSegment, filename=None):
        self.read = read
        self.filename = filename
        self.built = False
        self._bases = None
        self._qualities = None
        self._cigar_ops = None

    def __repr__(self):
        return f"{self.name}@{self.ref_id}:{self.position}-{self.end_position} ({self.filename})"

    def copy(self):
        other = AlignmentRecord(copy.copy(self.read), self.filename)
        if self.built:
            other.built = True
            other._bases, other._qualities, other._cigar_ops = self._bases, self._qualities, list(self._cigar_ops)
        return other

    __copy__ = copy

    def _build(self):
        r = self.read
        self._bases = r.query_sequence or ''
        self._qualities = pysam.qualities_to_qualitystring(r.query_qualities) if r.query_qualities is not None \
            else ''
        self._cigar_ops = [CigarOp(CIGAR_OPS[op], n) for op, n in (r.cigartuples or ())]
        self.built = True

    # core fields
    @property
    def ref_id(self) -> int:
        """ ID of the reference sequence, -1 for unplaced reads """
        return self.read.reference_id

    @property
    def position(self) -> int:
        """ 0-based start position of the alignment """
        return self.read.reference_start

    @property
    def end_position(self) -> int:
        """ Non-inclusive end position of the alignment (calculated from the CIGAR string) """
        end = self.read.reference_end
        return self.read.reference_start if end is None else end

    @property
    def key(self) -> (int, int):
        """ Coordinate sort key; unplaced reads (ref_id -1) sort after all reference sequences """
        ref_id = self.read.reference_id
        return MAX_INT if ref_id < 0 else ref_id, self.read.reference_start

    @property
    def length(self) -> int:
        """ Number of bases """
        return self.read.query_length

    @property
    def template_length(self) -> int:
        return self.read.template_length

    @property
    def name(self) -> str:
        return self.read.query_name

    @property
    def map_quality(self) -> int:
        return self.read.mapping_quality

    @property
    def mate_ref_id(self) -> int:
        return self.read.next_reference_id

    @property
    def mate_position(self) -> int:
        return self.read.next_reference_start

    # lazily extracted fields
    @property
    def query_bases(self) -> str:
        if not self.built:
            self._build()
        return self._bases

    @property
    def qualities(self) -> str:
        """ Phred+33 encoded base qualities """
        if not self.built:
            self._build()
        return self._qualities

    @property
    def cigar_ops(self) -> List[CigarOp]:
        if not self.built:
            self._build()
        return self._cigar_ops

    # tags
    def has_tag(self, tag) -> bool:
        return self.read.has_tag(tag)

    def get_tag(self, tag, default=None):
        """ Value of the passed tag or default if the tag is not set """
        if not self.read.has_tag(tag):
            return default
        return self.read.get_tag(tag)

    def remove_tag(self, tag) -> bool:
        if not self.read.has_tag(tag):
            return False
        self.read.set_tag(tag, None)
        return True

    def _add_tag(self, tag, value, value_type) -> bool:
        if self.read.has_tag(tag):
            return False
        self.read.set_tag(tag, value, value_type=value_type)
        return True

    def add_string_tag(self, tag, value: str) -> bool:
        """ Adds a string (Z) tag. Existing tags are not overwritten: returns False in this case """
        return self._add_tag(tag, value, 'Z')

    def add_char_tag(self, tag, value: str) -> bool:
        """ Adds a single printable character (A) tag, see add_string_tag() """
        return self._add_tag(tag, value, 'A')

    def add_int_tag(self, tag, value: int) -> bool:
        return self._add_tag(tag, value, 'i')

    def add_float_tag(self, tag, value: float) -> bool:
        return self._add_tag(tag, value, 'f')

    # flags
    is_duplicate = _flag_property(BamFlag.BAM_FDUP, "optical or PCR duplicate")
    is_failed_qc = _flag_property(BamFlag.BAM_FQCFAIL, "QC failure")
    is_mapped = _flag_property(BamFlag.BAM_FUNMAP, "the read itself is mapped", inverse=True)
    is_mate_mapped = _flag_property(BamFlag.BAM_FMUNMAP, "the mate is mapped", inverse=True)
    is_reverse_strand = _flag_property(BamFlag.BAM_FREVERSE, "mapped to the reverse strand")
    is_mate_reverse_strand = _flag_property(BamFlag.BAM_FMREVERSE, "mate mapped to the reverse strand")
    is_paired = _flag_property(BamFlag.BAM_FPAIRED, "paired in sequencing")
    is_proper_pair = _flag_property(BamFlag.BAM_FPROPER_PAIR, "mapped in a proper pair")
    is_first_mate = _flag_property(BamFlag.BAM_FREAD1, "read1")
    is_second_mate = _flag_property(BamFlag.BAM_FREAD2, "read2")
    is_secondary = _flag_property(BamFlag.BAM_FSECONDARY, "not the primary alignment")
    is_supplementary = _flag_property(BamFlag.BAM_SUPPLEMENTARY, "supplementary alignment")

    # clipping
    def starts_with_soft_clip(self) -> bool:
        return len(self.cigar_ops) > 0 and self.cigar_ops[0].type == 'S'

    def ends_with_soft_clip(self) -> bool:
        return len(self.cigar_ops) > 0 and self.cigar_ops[-1].type == 'S'

    def starts_with_hard_clip(self) -> bool:
        return len(self.cigar_ops) > 0 and self.cigar_ops[0].type == 'H'

    def ends_with_hard_clip(self) -> bool:
        return len(self.cigar_ops) > 0 and self.cigar_ops[-1].type == 'H'

    def matches_reference(self) -> bool:
        """ True if the alignment consists of match operations only (M or =) """
        return all(op.type in 'M=' for op in self.cigar_ops)


# ------------------------------------------------------------------------
# Readers
# ------------------------------------------------------------------------
class SeekCache(NamedTuple):
    """ First read of the last index-based region query and the file offset directly after it """
    ref_id: int
    start: int
    read: AlignmentRecord
    offset: int


class SourceReader:
    """
        Reads alignments from a single indexed SAM/BAM/CRAM file, optionally restricted to a genomic region.

        Without a region, reads are returned sequentially from the current file position. After a successful
        `set_region()` call, reads overlapping the region are returned until the first read that is located
        after the region (other chromosome or start >= region end) which ends the region.

        Seek caching: the first read of a region that was queried via the index is cached together with the
        (BGZF virtual) file offset directly after it. A later query on the same chromosome with a start >= the
        start of the cached query rewinds to this offset and scans sequentially instead of querying the index
        again. Reads located before the cached read in the file end before the cached region start and can
        thus not overlap the new region. Seek caching is available for BAM files only.

        The reader owns its file handle. Use it as a context manager or call `close()`.

        Examples
        --------
        >>> with SourceReader('a.bam') as it:
        >>>     it.set_region('chr1', 100, 200)
        >>>     for r in it:
        >>>         print(r.name)

        Parameters
        ----------
        file : str
            SAM/BAM/CRAM file path. An index file must exist.
        reference : str
            FASTA file used to decode CRAM files. Requires a .fai index.
        file_format : str
            optional, will be determined from filename if omitted

        Notes
        -----
        * Reported stats
            iterated_items, yielded_items: int
                Number of reads read from the file and number of returned reads
            n_fil_region: int
                Number of reads skipped as they do not overlap the current region
            n_region_end: int
                Number of regions that were ended by a read located after the region
            n_index_seeks, n_seek_cache_hits: int
                Number of region queries answered via the index and via the seek cache, respectively
    """

    def __init__(self, file, reference=None, file_format=None):
        self._stats = Counter()
        self.path = str(file)
        self.file = open_alignment_file(self.path, reference=reference, file_format=file_format)
        try:
            self.refdict = SequenceDictionary.load(self.file.header, name=self.path)
            self.read_groups = ReadGroup.load(self.file.header)
            sort_order = self.file.header.to_dict().get("HD", {}).get("SO")
        except Exception:
            self.file.close()
            raise
        if sort_order not in (None, "coordinate"):
            warnings.warn(f"{self.path} is not coordinate-sorted (SO:{sort_order}), regions may end early")
        self.region = None
        self.state = ReaderState.NO_REGION
        self._iterator = None
        self._pending = deque()  # reads that were read from the file but not returned yet
        self._seek_cache = None
        self._seekable = self.file.is_bam

    @property
    def stats(self):
        """ Returns the collected stats """
        return self._stats

    @property
    def header(self) -> pysam.AlignmentHeader:
        return self.file.header

    def __repr__(self):
        return f"SourceReader({self.path}, region={self.region}, state={self.state.name})"

    def set_region(self, chromosome, start=0, end=None) -> bool:
        """
            Restricts iteration to reads overlapping [start, end) on the passed chromosome.
            Returns False (and leaves the reader unchanged) if the chromosome is unknown or the coordinates
            are invalid.
        """
        region = Region.resolve(self.refdict, chromosome, start, end)
        if region is None:
            logging.debug(f"Invalid region {chromosome}:{start}-{end} for {self.path}")
            return False
        self._iterator = None
        cache = self._seek_cache
        if (cache is not None) and (cache.ref_id == region.ref_id) and (region.start >= cache.start) and \
                (self.file.tell() >= cache.offset):
            self._stats['n_seek_cache_hits'] += 1
            self.file.seek(cache.offset)
            self._iterator = self.file.fetch(until_eof=True)
            self._pending = deque([cache.read.copy()])
        else:
            self._stats['n_index_seeks'] += 1
            self._iterator = self.file.fetch(tid=region.ref_id, start=region.start, stop=region.end)
            first = self._pull()
            self._pending = deque() if first is None else deque([first.copy()])
            self._seek_cache = SeekCache(region.ref_id, region.start, first, self.file.tell()) if (
                    self._seekable and first is not None) else None
        self.region = region
        self.state = ReaderState.REGION_ACTIVE
        return True

    def _pull(self):
        """ Next read from the current iterator or None if exhausted """
        if self._iterator is None:
            if self.region is not None:
                return None
            self._iterator = self.file.fetch(until_eof=True)
        try:
            read = next(self._iterator)
        except StopIteration:
            return None
        except OSError as e:
            raise StreamError(f"Error reading alignment from {self.path}: {e}", self.path) from e
        self._stats['iterated_items'] += 1
        return AlignmentRecord(read, filename=self.path)

    def get_next_alignment(self):
        """ Returns the next read or None at the end of the current region (or file if no region was set) """
        if self.state == ReaderState.REGION_EXHAUSTED:
            return None
        while True:
            r = self._pending.popleft() if self._pending else self._pull()
            if r is None:
                if self.region is not None:
                    self._end_region()
                return None
            if self.region is None:
                break
            if self.region.is_past(r):
                self._stats['n_region_end'] += 1
                self._end_region()
                return None
            if not self.region.overlaps(r):
                self._stats['n_fil_region'] += 1
                continue
            break
        self._stats['yielded_items'] += 1
        return r

    def _end_region(self):
        self._iterator = None
        self._pending.clear()
        self.state = ReaderState.REGION_EXHAUSTED

    def __iter__(self):
        while (r := self.get_next_alignment()) is not None:
            yield r

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self._iterator = None
        self._pending.clear()
        self._seek_cache = None
        if self.file is not None:
            self.file.close()


class MergeReader:
    """
        Merges the reads of several SourceReaders into a single stream of (source index, read) tuples.

        All sources must have compatible sequence dictionaries (same sequences with same lengths in the same order).
        With `MergeType.POSITION`, one lookahead read is buffered per source and the read with the smallest
        (reference id, start) key is returned next; ties are broken by the source index. Reads of unplaced
        alignments (reference id -1) sort last. With `MergeType.FILE_ORDER`, all reads of source 0 are returned
        before any read of source 1 and so on; keys are not compared.

        Once all sources are exhausted, the reader is drained and returns None until the next successful
        `set_region()` call.

        Examples
        --------
        >>> with MergeReader(['a.bam', 'b.bam'], merge_type='position') as it:
        >>>     it.set_region('chr1', 0, 1000)
        >>>     for idx, r in it:
        >>>         print(it.files[idx], r.name)

        Parameters
        ----------
        files : List[str]
            SAM/BAM/CRAM file paths, at least one
        reference : str
            FASTA file, required for CRAM files
        merge_type : MergeType or str
            MergeType.POSITION (default) or MergeType.FILE_ORDER or their (case-insensitive) names

        Raises
        ------
        ConfigurationError
            no file passed, invalid merge type or incompatible sequence dictionaries
        ResourceError
            a source could not be opened

        Notes
        -----
        * Reported stats
            yielded_items, source index: (int, int)
                Number of yielded reads per source
    """

    def __init__(self, files, reference=None, merge_type=MergeType.POSITION):
        self._stats = Counter()
        if isinstance(files, (str, PathLike)):
            files = [files]
        if files is None or len(files) == 0:
            raise ConfigurationError("Must provide at least one file to MergeReader")
        self.merge_type = MergeType.parse(merge_type)
        self.files = [str(f) for f in files]
        self.readers = []
        try:
            for f in self.files:
                reader = SourceReader(f, reference=reference)
                self.readers.append(reader)
                self.readers[0].refdict.check_compatible(reader.refdict, self.files[0], f)
        except ReadStreamError:
            self.close()
            raise
        logging.debug(f"Merging {len(self.readers)} sources by {self.merge_type.name}")
        self._reset()

    @classmethod
    def from_config(cls, config):
        """ Creates a MergeReader from a config dict with keys 'sources', 'reference' and 'merge_type' """
        return cls(get_config(config, 'sources', required=True),
                   reference=get_config(config, 'reference', default_value=None),
                   merge_type=get_config(config, 'merge_type', default_value=MergeType.POSITION))

    def _reset(self):
        self.state = MergeState.UNPRIMED
        self._slots = [None] * len(self.readers)  # lookahead read per source
        self._exhausted = [False] * len(self.readers)
        self._queue = SortedList()  # (ref_id, start, source index) keys of filled slots
        self._current = 0  # current source in FILE_ORDER mode

    @property
    def stats(self):
        """ Returns the collected stats """
        return self._stats

    @property
    def refdict(self) -> SequenceDictionary:
        return self.readers[0].refdict

    @property
    def header(self) -> pysam.AlignmentHeader:
        return self.readers[0].header

    def get_header(self, file_index=0) -> pysam.AlignmentHeader:
        if 0 <= file_index < len(self.readers):
            return self.readers[file_index].header
        raise IndexError(f"Invalid file index {file_index}")

    def __repr__(self):
        return f"MergeReader({self.files}, merge_type={self.merge_type.name}, state={self.state.name})"

    def set_region(self, chromosome, start=0, end=None) -> bool:
        """
            Sets the region of all sources. Returns False if the region is invalid; in this case no source is
            changed. If a source rejects the region nonetheless, False is returned and sources that accepted it
            keep the new region: the reader should then not be used for this region.
        """
        if Region.resolve(self.refdict, chromosome, start, end) is None:
            logging.debug(f"Invalid region {chromosome}:{start}-{end}")
            return False
        results = [r.set_region(chromosome, start, end) for r in self.readers]
        self._reset()
        return all(results)

    def _next_by_position(self):
        for i, slot in enumerate(self._slots):
            if slot is None and not self._exhausted[i]:
                r = self.readers[i].get_next_alignment()
                if r is None:
                    self._exhausted[i] = True
                else:
                    self._slots[i] = r
                    self._queue.add((*r.key, i))
        if len(self._queue) == 0:
            return None
        i = self._queue.pop(0)[-1]
        r, self._slots[i] = self._slots[i], None
        return i, r

    def _next_by_file(self):
        while self._current < len(self.readers):
            r = self.readers[self._current].get_next_alignment()
            if r is not None:
                return self._current, r
            self._current += 1
        return None

    def get_next_alignment(self):
        """ Returns the next (source index, read) tuple or None if all sources are exhausted """
        if self.state == MergeState.DRAINED:
            return None
        self.state = MergeState.STREAMING
        if self.merge_type == MergeType.POSITION:
            nxt = self._next_by_position()
        else:
            nxt = self._next_by_file()
        if nxt is None:
            self.state = MergeState.DRAINED
            logging.debug(f"Drained {len(self.readers)} sources")
            return None
        self._stats['yielded_items', nxt[0]] += 1
        return nxt

    def __iter__(self):
        while (nxt := self.get_next_alignment()) is not None:
            yield nxt

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """ Closes all sources """
        for r in self.readers:
            r.close()
