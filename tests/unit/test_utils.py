import pytest

from cmibam import utils


@pytest.mark.parametrize(('path', 'old', 'new', 'expected'), [
    ('S1.bam', '.bam', '.clean.dedup.bam', 'S1.clean.dedup.bam'),
    ('/work/S1.bam', '.bam', '.clean.bam', '/work/S1.clean.bam'),
    ('S1.clean.dedup.recal.reduced.bam', '.bam', '.vcf', 'S1.clean.dedup.recal.reduced.vcf'),
    ('S1.sam', '.bam', '.vcf', 'S1.sam.vcf'),
    ('S1.bam', '', '.idx', 'S1.bam.idx'),
])
def test_swap_ext(path, old, new, expected):
    assert utils.swap_ext(path, old, new) == expected


def test_swap_ext_is_not_idempotent():
    once = utils.swap_ext('S1.bam', '.bam', '.clean.bam')
    twice = utils.swap_ext(once, '.bam', '.clean.bam')
    assert twice == 'S1.clean.clean.bam'
    assert len(twice) > len(once)


def test_swap_ext_on_list():
    result = utils.swap_ext(['a.bam', 'b.bam'], '.bam', '.bai')
    assert result == ['a.bai', 'b.bai']


def test_swap_ext_rejects_other_types():
    with pytest.raises(ValueError):
        utils.swap_ext(None, '.bam', '.bai')


@pytest.mark.parametrize(('fname', 'expected'), [
    ('S1.vcf', ['S1.vcf', 'S1.vcf.idx']),
    ('S1.vcf.gz', ['S1.vcf.gz', 'S1.vcf.gz.tbi']),
    ('S1.txt', ['S1.txt']),
])
def test_file_plus_index(fname, expected):
    assert utils.file_plus_index(fname) == expected


def test_bam_index():
    assert utils.bam_index('S1.clean.bam') == 'S1.clean.bai'


def test_partition():
    evens, odds = utils.partition(lambda x: x % 2, range(6), tolist=True)
    assert evens == [0, 2, 4]
    assert odds == [1, 3, 5]


def test_safe_makedir(tmp_path):
    new_dir = str(tmp_path / 'a' / 'b')
    assert utils.safe_makedir(new_dir) == new_dir
    assert (tmp_path / 'a' / 'b').is_dir()
    assert utils.safe_makedir(new_dir) == new_dir
