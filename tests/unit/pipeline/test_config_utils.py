import pytest

from cmibam.pipeline import config_utils
from cmibam.pipeline.errors import ConfigurationError


def test_defaults(config):
    assert config.skip_qc is False
    assert config.do_post_recal is False
    assert config.do_single_sample_calling is False
    assert config.quick is False
    assert config.num_cores == 4
    assert config.scatter_count == 0
    assert config.dbsnp == ("/refdata/dbsnp_135.b37.vcf",)
    assert config.indels == ()


def test_config_is_immutable(config):
    with pytest.raises(AttributeError):
        config.skip_qc = True


def test_algorithm_options_override_defaults():
    config = config_utils.build_config({"algorithm": {"skip_qc": True, "num_cores": 8},
                                        "dbsnp": "/ref/dbsnp.vcf",
                                        "targets": None})
    assert config.skip_qc is True
    assert config.num_cores == 8
    assert config.do_post_recal is False
    assert config.dbsnp == ("/ref/dbsnp.vcf",)
    assert config.targets is None


@pytest.mark.parametrize('algorithm', [
    {'skip_qc': 'yes'},
    {'do_single_sample_calling': 1},
    {'num_cores': -1},
    {'scatter_count': True},
    {'default_platform': 5},
])
def test_invalid_algorithm_options(algorithm):
    with pytest.raises(ConfigurationError):
        config_utils.build_config({"algorithm": algorithm})


@pytest.mark.parametrize('config', [
    {'dbsnp': []},
    {'dbsnp': [1, 2]},
    {'reference': None},
    {'resources': {'bqsr': {'memory': 'lots'}}},
    {'resources': {'bqsr': 4}},
])
def test_invalid_files_and_resources(config):
    with pytest.raises(ConfigurationError):
        config_utils.build_config(config)


@pytest.mark.parametrize(('kind', 'expected'), [
    ('merge', (1, 1, 0)),
    ('bqsr', (4, 4, 0)),
    ('apply_bqsr', (1, 4, 0)),
    ('reduce', (4, 1, 0)),
    ('bwa_aln', (5, 4, 0)),
    ('bwa_samse', (6, 1, 0)),
    ('bwa_sampe', (4, 1, 0)),
    ('contest', (2, 1, 0)),
])
def test_get_resources_defaults(config, kind, expected):
    assert tuple(config_utils.get_resources(kind, config)) == expected


def test_get_resources_scatter():
    config = config_utils.build_config({"algorithm": {"scatter_count": 10}})
    assert config_utils.get_resources("indel", config).scatter == 10
    assert config_utils.get_resources("target", config).scatter == 10
    assert config_utils.get_resources("call", config).scatter == 10
    assert config_utils.get_resources("bqsr", config).scatter == 0


def test_get_resources_override():
    config = config_utils.build_config({"resources": {"default": {"memory": 2},
                                                      "merge": {"cores": 2}}})
    assert config_utils.get_resources("merge", config) == config_utils.Resources(2, 2, 0)
    assert config_utils.get_resources("bqsr", config).memory == 4


def test_load_config_expands_variables(tmp_path, monkeypatch):
    monkeypatch.setenv("REFDIR", "/shared/ref")
    config_file = tmp_path / "config.yaml"
    config_file.write_text("reference: $REFDIR/genome.fa\n"
                           "dbsnp:\n  - $REFDIR/dbsnp.vcf\n"
                           "algorithm:\n  quick: true\n"
                           "resources:\n  BQSR:\n    memory: 8\n")
    raw = config_utils.load_config(str(config_file))
    assert raw["reference"] == "/shared/ref/genome.fa"
    assert raw["resources"]["bqsr"] == {"memory": 8}
    config = config_utils.build_config(raw)
    assert config.dbsnp == ("/shared/ref/dbsnp.vcf",)
    assert config.quick is True
    assert config_utils.get_resources("bqsr", config).memory == 8


def test_get_program(config):
    assert config_utils.get_program("bwa", config) == "/opt/bwa/bin/bwa"
    with pytest.raises(ConfigurationError):
        config_utils.get_program("novoalign", config)
