"""
    Creates small, synthetic test resources.

    Readstream tests do not depend on downloaded data: test BAM (and CRAM) files are written on the fly with pysam,
    coordinate-sorted and indexed. Reads are described by simple tuples, see `write_test_bam()`.

    Examples
    --------
    >>> write_test_bam('a.bam', [('chr1', 5, 10), ('chr1', 20, 10, 'r2')], references=[('chr1', 1000)])
    >>> make_random_reads(100, references=[('chr1', 1000), ('chr2', 500)], seed=1)
    >>> fa = write_fasta('ref.fa', references=[('chr1', 1000)])
    >>> write_test_bam('a.cram', [('chr1', 5, 10)], references=[('chr1', 1000)], reference=fa)
"""
import random

import pysam

#: default reference sequences of test files
DEFAULT_REFERENCES = (('chr1', 50000), ('chr2', 20000))


def make_header(references=DEFAULT_REFERENCES, read_groups=None) -> dict:
    """ Creates a pysam header dict for the passed (name, length) pairs and (id, sample, library) read groups """
    header = {
        'HD': {'VN': '1.6', 'SO': 'coordinate'},
        'SQ': [{'SN': chrom, 'LN': chrlen} for chrom, chrlen in references],
    }
    if read_groups:
        header['RG'] = [{k: v for k, v in zip(('ID', 'SM', 'LB'), rg) if v is not None} for rg in read_groups]
    return header


def make_read(header, chromosome, start, length=10, name=None, flag=0, mapq=60, cigar=None, tags=None):
    """ Creates a pysam.AlignedSegment. If no cigar is passed, a full match is assumed. Placed but unmapped reads
    can be created by passing the BAM_FUNMAP flag. """
    r = pysam.AlignedSegment(header)
    r.query_name = f"read_{chromosome}_{start}" if name is None else name
    r.query_sequence = ''.join(random.choice('ACGT') for _ in range(length))
    r.query_qualities = pysam.qualitystring_to_array('I' * length)
    r.flag = flag
    r.reference_id = header.get_tid(chromosome) if chromosome is not None else -1
    r.reference_start = start if chromosome is not None else -1
    r.mapping_quality = mapq
    if chromosome is not None and not (flag & 0x4):
        r.cigartuples = [(0, length)] if cigar is None else cigar
    if tags is not None:
        r.set_tags(tags)
    return r


def write_test_bam(out_file, reads, references=DEFAULT_REFERENCES, read_groups=None, index=True,
                   reference=None) -> str:
    """
        Writes a coordinate-sorted (and optionally indexed) BAM or CRAM file.

        Parameters
        ----------
        out_file : str
            output file
        reads : iterable
            (chromosome, start[, length[, name[, flag]]]) tuples with 0-based start coordinates. Reads with
            chromosome None are written as unplaced reads at the end of the file.
        references : list
            (name, length) tuples
        read_groups : list
            optional (id, sample, library) tuples
        index : bool
            if True, an index (.bai or .crai) will be created
        reference : str
            FASTA file, required for writing CRAM files (".cram" extension), see write_fasta()

        Returns
        -------
        The output file name
    """
    out_file = str(out_file)
    header = pysam.AlignmentHeader.from_dict(make_header(references, read_groups))
    chrom_idx = {chrom: i for i, (chrom, _) in enumerate(references)}
    segments = [make_read(header, *rd) for rd in reads]
    segments.sort(key=lambda r: (chrom_idx[r.reference_name] if r.reference_id >= 0 else len(chrom_idx),
                                 r.reference_start if r.reference_id >= 0 else 0))
    mode = "wc" if out_file.endswith(".cram") else "wb"
    with pysam.AlignmentFile(out_file, mode, header=header, reference_filename=reference) as out:  # @UndefinedVariable
        for r in segments:
            out.write(r)
    if index:
        pysam.index(out_file)  # @UndefinedVariable
    return out_file


def make_random_reads(n, references=DEFAULT_REFERENCES, length=50, seed=None, prefix='read') -> list:
    """ Creates n random read tuples (see write_test_bam) distributed over the passed references """
    rng = random.Random(seed)
    reads = []
    for i in range(n):
        chrom, chrlen = rng.choice(references)
        reads.append((chrom, rng.randint(0, chrlen - length), length, f"{prefix}{i}"))
    return reads


def write_fasta(out_file, references=DEFAULT_REFERENCES, seed=None, ncol=60) -> str:
    """ Writes a FASTA file with random sequences of the passed (name, length) pairs and indexes it (.fai) """
    out_file = str(out_file)
    rng = random.Random(seed)
    with open(out_file, 'wt') as out:
        for chrom, chrlen in references:
            seq = ''.join(rng.choice('ACGT') for _ in range(chrlen))
            print(f">{chrom}", file=out)
            for i in range(0, chrlen, ncol):
                print(seq[i:i + ncol], file=out)
    pysam.faidx(out_file)  # @UndefinedVariable
    return out_file
