"""
Tests for multi-source readers
"""
import json

import pytest

import readstream as rs
from readstream.testdata import write_test_bam, make_random_reads

REFERENCES = [('chr1', 50000), ('chr2', 20000)]


def test_position_order(default_testdata):
    with rs.MergeReader([default_testdata['a_bam'], default_testdata['b_bam']]) as it:
        assert it.merge_type == rs.MergeType.POSITION
        assert it.state == rs.MergeState.UNPRIMED
        res = [(idx, r.name, r.position) for idx, r in it]
        assert res == [(0, 'a1', 5), (1, 'b1', 5), (0, 'a2', 10), (1, 'b2', 20)]
        assert it.state == rs.MergeState.DRAINED
        assert it.stats['yielded_items', 0] == 2
        assert it.stats['yielded_items', 1] == 2


def test_file_order(default_testdata):
    with rs.MergeReader([default_testdata['a_bam'], default_testdata['b_bam']], merge_type='file_order') as it:
        assert it.merge_type == rs.MergeType.FILE_ORDER
        assert [(idx, r.name) for idx, r in it] == [(0, 'a1'), (0, 'a2'), (1, 'b1'), (1, 'b2')]


def test_drained_is_absorbing(default_testdata):
    with rs.MergeReader([default_testdata['a_bam'], default_testdata['b_bam']]) as it:
        assert len(list(it)) == 4
        assert it.state == rs.MergeState.DRAINED
        stats = it.stats.copy()
        for _ in range(3):
            assert it.get_next_alignment() is None
        assert it.state == rs.MergeState.DRAINED
        assert it.stats == stats


@pytest.mark.parametrize("merge_type", [rs.MergeType.POSITION, rs.MergeType.FILE_ORDER])
def test_random_merge(default_testdata, merge_type):
    files = default_testdata['random_bams']
    regions = [('chr1', 0, 10000), ('chr1', 5000, 30000), ('chr2', 0, 20000), ('chr1', 40000, 50000)]
    with rs.MergeReader(files, merge_type=merge_type) as it:
        for chrom, start, end in regions:
            assert it.set_region(chrom, start, end)
            assert it.state == rs.MergeState.UNPRIMED
            res = list(it)
            # compare to single-source iteration
            expected = []
            for i, f in enumerate(files):
                with rs.SourceReader(f) as sr:
                    assert sr.set_region(chrom, start, end)
                    expected += [(i, r.name) for r in sr]
            assert sorted((idx, r.name) for idx, r in res) == sorted(expected)
            if merge_type == rs.MergeType.POSITION:
                keys = [(r.key, idx) for idx, r in res]
                assert rs.check_list(keys, mode='inceq')  # sorted by position, ties by source index
            else:
                assert [idx for idx, _ in res] == [idx for idx, _ in expected]
                assert rs.check_list([idx for idx, _ in res], mode='inceq')


def test_whole_file_merge(default_testdata):
    files = default_testdata['random_bams']
    with rs.MergeReader(files) as it:
        res = list(it)
    assert len(res) == 900
    assert rs.check_list([(r.key, idx) for idx, r in res], mode='inceq')
    assert {r.filename for _, r in res} == set(files)


def test_unplaced_reads_last(base_path):
    a = write_test_bam(base_path / 'a.bam', [('chr2', 100, 10, 'a_chr2'), (None, -1, 10, 'a_unplaced', 4)],
                       references=REFERENCES)
    b = write_test_bam(base_path / 'b.bam', [('chr1', 100, 10, 'b_chr1'), ('chr2', 500, 10, 'b_chr2')],
                       references=REFERENCES)
    with rs.MergeReader([a, b]) as it:
        assert [r.name for _, r in it] == ['b_chr1', 'a_chr2', 'b_chr2', 'a_unplaced']


def test_set_region(default_testdata):
    with rs.MergeReader([default_testdata['a_bam'], default_testdata['b_bam']]) as it:
        assert it.set_region('chr1', 8, 100)
        assert [(idx, r.name) for idx, r in it] == [(0, 'a1'), (1, 'b1'), (0, 'a2'), (1, 'b2')]  # a1/b1 end at 15
        assert it.set_region('chr1', 16, 100)
        assert [(idx, r.name) for idx, r in it] == [(0, 'a2'), (1, 'b2')]
        # unknown chromosome: no source is changed
        assert not it.set_region('chrX', 100, 200)
        assert all(r.region == rs.Region('chr1', 0, 16, 100) for r in it.readers)
        assert it.state == rs.MergeState.DRAINED
        assert not it.set_region('chr1', 100, 10)
        # restart after drain
        assert it.set_region('chr2')
        assert it.get_next_alignment() is None
        assert it.state == rs.MergeState.DRAINED


def test_set_region_idempotent(default_testdata):
    files = default_testdata['random_bams']
    with rs.MergeReader(files) as it1, rs.MergeReader(files) as it2:
        assert it1.set_region('chr1', 1000, 20000)
        assert it2.set_region('chr1', 1000, 20000)
        assert it2.set_region('chr1', 1000, 20000)
        assert [(i, r.name) for i, r in it1] == [(i, r.name) for i, r in it2]


def test_incompatible_dictionaries(base_path):
    a = write_test_bam(base_path / 'a.bam', [('chr1', 10)], references=[('chr1', 100)])
    b = write_test_bam(base_path / 'b.bam', [('chr1', 10)], references=[('chr1', 200)])
    c = write_test_bam(base_path / 'c.bam', [('chr1', 10)], references=[('chr1', 100)])
    for files in [[a, b], [b, a], [a, c, b]]:
        with pytest.raises(rs.IncompatibleReferencesError) as e:
            rs.MergeReader(files)
        assert a in str(e.value) and b in str(e.value)
    with rs.MergeReader([a, c]) as it:
        assert len(list(it)) == 2


def test_configuration_errors(default_testdata, base_path):
    a = default_testdata['a_bam']
    with pytest.raises(rs.ConfigurationError):
        rs.MergeReader([])
    with pytest.raises(rs.ConfigurationError):
        rs.MergeReader(None)
    with pytest.raises(rs.ConfigurationError):
        rs.MergeReader([a], merge_type='by_name')
    with pytest.raises(rs.ConfigurationError):
        rs.MergeReader([a], merge_type=None)
    with pytest.raises(ValueError):  # ConfigurationErrors are ValueErrors
        rs.MergeReader([a], merge_type=3)
    with pytest.raises(rs.MissingFileError) as e:
        rs.MergeReader([a, base_path / 'missing.bam'])
    assert e.value.path == str(base_path / 'missing.bam')
    with rs.MergeReader(a) as it:  # single file
        assert it.files == [a]
        assert len(list(it)) == 2


def test_headers(default_testdata):
    with rs.MergeReader([default_testdata['a_bam'], default_testdata['b_bam']]) as it:
        assert list(it.refdict.items()) == default_testdata['references']
        assert it.header.to_dict()["RG"][0]["ID"] == "rgA"
        assert it.get_header(1).to_dict()["RG"][0]["ID"] == "rgB"
        with pytest.raises(IndexError):
            it.get_header(2)
        assert it.readers[0].read_groups == [rs.ReadGroup('rgA', 'sampleA', 'libA')]
        assert it.readers[1].read_groups == [rs.ReadGroup('rgB', 'sampleB', None)]


def test_from_config(default_testdata):
    config = json.loads(json.dumps({'sources': [default_testdata['a_bam'], default_testdata['b_bam']],
                                    'merge_type': 'FILE_ORDER'}))
    with rs.MergeReader.from_config(config) as it:
        assert it.merge_type == rs.MergeType.FILE_ORDER
        assert [r.name for _, r in it] == ['a1', 'a2', 'b1', 'b2']
    with pytest.raises(rs.ConfigurationError, match='sources'):
        rs.MergeReader.from_config({'merge_type': 'position'})


def test_lookahead_reads_are_not_shared(default_testdata):
    """ Modifying returned reads does not affect buffered reads of other sources """
    with rs.MergeReader([default_testdata['a_bam'], default_testdata['b_bam']]) as it:
        idx, r = it.get_next_alignment()
        assert it.state == rs.MergeState.STREAMING
        r.read.reference_start = 1000
        r.read.query_name = 'changed'
        assert [(i, x.name) for i, x in it] == [(1, 'b1'), (0, 'a2'), (1, 'b2')]


def test_merge_type():
    assert rs.MergeType.parse('Position') == rs.MergeType.POSITION
    assert rs.MergeType.parse('file_order') == rs.MergeType.FILE_ORDER
    assert rs.MergeType.parse(rs.MergeType.FILE_ORDER) == rs.MergeType.FILE_ORDER
    for invalid in ['by_name', '', None, 1]:
        with pytest.raises(rs.ConfigurationError):
            rs.MergeType.parse(invalid)
