from enum import IntEnum, Enum

from .errors import ConfigurationError

#: maximum integer value, assuming 32-bit ints
MAX_INT = 2 ** 31 - 1

#: CIGAR operation characters, indexed by their BAM op code
CIGAR_OPS = 'MIDNSHP=XB'


class BamFlag(IntEnum):
    """BAM flags, @see https://broadinstitute.github.io/picard/explain-flags.html"""
    BAM_FPAIRED = 0x1  # the read is paired in sequencing, no matter whether it is mapped in a pair
    BAM_FPROPER_PAIR = 0x2  # the read is mapped in a proper pair
    BAM_FUNMAP = 0x4  # the read itself is unmapped; conflictive with BAM_FPROPER_PAIR
    BAM_FMUNMAP = 0x8  # the mate is unmapped
    BAM_FREVERSE = 0x10  # the read is mapped to the reverse strand
    BAM_FMREVERSE = 0x20  # the mate is mapped to the reverse strand
    BAM_FREAD1 = 0x40  # this is read1
    BAM_FREAD2 = 0x80  # this is read2
    BAM_FSECONDARY = 0x100  # not primary alignment
    BAM_FQCFAIL = 0x200  # QC failure
    BAM_FDUP = 0x400  # optical or PCR duplicate
    BAM_SUPPLEMENTARY = 0x800  # supplementary alignment


class MergeType(Enum):
    """ Order in which a MergeReader emits the reads of its sources """
    POSITION = 0  # global (reference id, start) order, ties broken by source index
    FILE_ORDER = 1  # all reads of source 0, then all reads of source 1, ...

    @classmethod
    def parse(cls, value):
        """ Returns the MergeType for the passed member or (case-insensitive) name """
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.upper() in cls.__members__:
            return cls[value.upper()]
        raise ConfigurationError(f"Invalid merge type {value!r}, expected one of {list(cls.__members__)}")


class ReaderState(Enum):
    """ Iteration state of a SourceReader """
    NO_REGION = 0  # sequential scan from the current file position
    REGION_ACTIVE = 1
    REGION_EXHAUSTED = 2


class MergeState(Enum):
    """ Iteration state of a MergeReader """
    UNPRIMED = 0
    STREAMING = 1
    DRAINED = 2
