import logging
from collections import Counter

from tqdm.auto import tqdm

import readstream as rs


def merge_regions(files, out_file, regions=None, reference=None, merge_type='position', sort_and_index=False,
                  disable_progressbar=True) -> Counter:
    """
    Merges the reads of the passed files into a single BAM file.

    Parameters
    ----------
    files : list
        indexed SAM/BAM/CRAM files with compatible sequence dictionaries
    out_file : str
        output BAM file
    regions : list
        optional list of region strings (e.g., 'chr1:101-200' or 'chr2'). Regions are merged in the passed
        order; invalid regions are logged and skipped. If None, the complete files are merged.
    reference : str
        FASTA file, required for CRAM input
    merge_type : str or MergeType
        'position' (default) or 'file_order'
    sort_and_index : bool
        if True, the output file will be sorted and indexed
    disable_progressbar : bool
        if True, no tqdm progressbar will be shown

    Returns
    -------
    Counter with the number of written reads per source index

    Example
    -------
    >>> merge_regions(['a.bam', 'b.bam'], 'merged.bam', regions=['chr1:1-1000', 'chr2'])
    """
    written = Counter()
    with rs.MergeReader(files, reference=reference, merge_type=merge_type) as it:
        with rs.BamWriter(out_file, it, sort_and_index=sort_and_index) as out:
            for reg in [None] if regions is None else regions:
                if reg is not None:
                    try:
                        valid = it.set_region(*rs.parse_region(reg))
                    except ValueError as e:
                        logging.warning(e)
                        valid = False
                    if not valid:
                        logging.warning(f"Skipping invalid region {reg}")
                        continue
                with tqdm(desc='all' if reg is None else reg, disable=disable_progressbar) as pbar:
                    for idx, r in it:
                        out.write_record(r)
                        written[idx] += 1
                        pbar.update(1)
    logging.info(f"Wrote {sum(written.values())} reads from {len(it.files)} files to {out_file}")
    return written


def merge_from_config(config, out_file, sort_and_index=False, disable_progressbar=True) -> Counter:
    """
    Runs merge_regions() with the sources, reference, merge type and regions configured in the passed dict.

    Example
    -------
    >>> merge_from_config({'sources': ['a.bam', 'b.bam'], 'regions': ['chr1']}, 'merged.bam')
    """
    return merge_regions(rs.get_config(config, 'sources', required=True), out_file,
                         regions=rs.get_config(config, 'regions', default_value=None),
                         reference=rs.get_config(config, 'reference', default_value=None),
                         merge_type=rs.get_config(config, 'merge_type', default_value='position'),
                         sort_and_index=sort_and_index, disable_progressbar=disable_progressbar)
