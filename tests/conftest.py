""" Pytest configuration file for the test suite. """
import pytest

from readstream.testdata import write_test_bam, make_random_reads

REFERENCES = [('chr1', 50000), ('chr2', 20000)]


@pytest.fixture()
def base_path(tmp_path, monkeypatch):
    """Go to a fresh temporary dir"""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def default_testdata(base_path) -> dict:
    """ Two small BAM files with compatible headers and a set of larger, random BAM files """
    config = {
        'a_bam': write_test_bam(base_path / 'a.bam', [('chr1', 5, 10, 'a1'), ('chr1', 10, 10, 'a2')],
                                references=REFERENCES, read_groups=[('rgA', 'sampleA', 'libA')]),
        'b_bam': write_test_bam(base_path / 'b.bam', [('chr1', 5, 10, 'b1'), ('chr1', 20, 10, 'b2')],
                                references=REFERENCES, read_groups=[('rgB', 'sampleB', None)]),
        'random_bams': [write_test_bam(base_path / f'random{i}.bam',
                                       make_random_reads(300, references=REFERENCES, seed=i, prefix=f'r{i}_'),
                                       references=REFERENCES) for i in range(3)],
        'references': REFERENCES
    }
    return config
