"""Loads configurations from .yaml files and expands environment variables.

The raw YAML dictionary is validated once and turned into an immutable
PipelineConfig, which is all the graph building code consumes.
"""
import collections
import copy
import os

import six
import toolz as tz
import yaml

from cmibam.pipeline.errors import ConfigurationError

PipelineConfig = collections.namedtuple(
    "PipelineConfig",
    "skip_qc do_post_recal do_single_sample_calling quick test_mode "
    "default_platform bwa_parameters base_fastq_path num_cores scatter_count "
    "reference dbsnp indels targets baits known_sites "
    "contest_array_intervals contest_pop_frequencies programs resources upload")

Resources = collections.namedtuple("Resources", "memory cores scatter")

DEFAULTS = {
    "algorithm": {"skip_qc": False,
                  "do_post_recal": False,
                  "do_single_sample_calling": False,
                  "quick": False,
                  "test_mode": False,
                  "default_platform": "",
                  "bwa_parameters": " -q 5 -l 32 -k 2 -o 1 ",
                  "base_fastq_path": "",
                  "num_cores": 4,
                  "scatter_count": 0},
    "resources": {"default": {"memory": 1},
                  "bqsr": {"memory": 4},
                  "reduce": {"memory": 4},
                  "bwa_aln": {"memory": 5},
                  "bwa_samse": {"memory": 6},
                  "bwa_sampe": {"memory": 4},
                  "contest": {"memory": 2}},
    "reference": "/refdata/human_g1k_v37_decoy.fasta",
    "dbsnp": ["/refdata/dbsnp_135.b37.vcf"],
    "indels": [],
    "targets": "/refdata/whole_exome_agilent_1.1_refseq_plus_3_boosters.Homo_sapiens_b37_decoy.targets.interval_list",
    "baits": "/refdata/whole_exome_agilent_1.1_refseq_plus_3_boosters.Homo_sapiens_b37_decoy.baits.interval_list",
    "known_sites": "/refdata/ALL.wgs.phase1_release_v3.20101123.snps_indels_sv.sites.vcf.gz",
    "contest": {"array_intervals": "/refdata/SNP6.hg19.interval_list",
                "pop_frequencies": "/refdata/hg19_population_stratified_af_hapmap_3.3.fixed.vcf"},
    "programs": {"bwa": "/opt/bwa/bin/bwa",
                 "picard": "/opt/picard-metrics/",
                 "contest": ("java -Djava.io.tmpdir=/local/tmp -Xmx1g -jar /opt/ContEst/ContEst-1.0.2.jar "
                             "-S /opt/ContEst/ContaminationPipeline.scala")}}

# Task kinds using multiple threads and splitting by intervals
MULTICORE_KINDS = set(["bwa_aln", "bqsr", "apply_bqsr"])
SCATTER_KINDS = set(["target", "indel", "call"])

_BOOL_OPTS = ["skip_qc", "do_post_recal", "do_single_sample_calling", "quick", "test_mode"]
_INT_OPTS = ["num_cores", "scatter_count"]
_STR_OPTS = ["default_platform", "bwa_parameters", "base_fastq_path"]

# ## Retrieval functions

def load_config(config_file):
    """Load YAML config file, replacing environmental variables.
    """
    with open(config_file) as in_handle:
        config = yaml.safe_load(in_handle)
    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigurationError("Expected a dictionary of options in %s" % config_file)
    config = _expand_paths(config)
    if "resources" not in config:
        config["resources"] = {}
    # lowercase resource names, matching task kinds
    newr = {}
    for k, v in config["resources"].items():
        if k.lower() != k:
            newr[k.lower()] = v
    config["resources"].update(newr)
    return config

def _expand_paths(config):
    for field, setting in config.items():
        if isinstance(config[field], dict):
            config[field] = _expand_paths(config[field])
        elif isinstance(config[field], list):
            config[field] = [expand_path(x) for x in setting]
        else:
            config[field] = expand_path(setting)
    return config

def expand_path(path):
    """ Combines os.path.expandvars with replacing ~ with $HOME.
    """
    try:
        return os.path.expandvars(path.replace("~", "$HOME"))
    except AttributeError:
        return path

def _merge_defaults(config):
    out = copy.deepcopy(DEFAULTS)
    for k, v in (config or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            for subk, subv in v.items():
                if isinstance(subv, dict) and isinstance(out[k].get(subk), dict):
                    out[k][subk] = tz.merge(out[k][subk], subv)
                else:
                    out[k][subk] = subv
        else:
            out[k] = v
    return out

# ## Validation

def _check_bools(algorithm):
    for opt in _BOOL_OPTS:
        if not isinstance(algorithm[opt], bool):
            raise ConfigurationError("Expected true/false for algorithm option %s, found %s"
                                     % (opt, algorithm[opt]))

def _check_ints(algorithm):
    for opt in _INT_OPTS:
        val = algorithm[opt]
        if isinstance(val, bool) or not isinstance(val, six.integer_types) or val < 0:
            raise ConfigurationError("Expected a non-negative integer for algorithm option %s, found %s"
                                     % (opt, val))

def _check_strings(algorithm):
    for opt in _STR_OPTS:
        if algorithm[opt] is None:
            algorithm[opt] = ""
        if not isinstance(algorithm[opt], six.string_types):
            raise ConfigurationError("Expected a string for algorithm option %s, found %s"
                                     % (opt, algorithm[opt]))

def _as_file_list(name, val):
    if val is None:
        return ()
    if isinstance(val, six.string_types):
        return (val,)
    if not isinstance(val, (list, tuple)) or not all(isinstance(x, six.string_types) for x in val):
        raise ConfigurationError("Expected a file or list of files for %s, found %s" % (name, val))
    return tuple(val)

def _check_resources(resources):
    for name, vals in resources.items():
        if not isinstance(vals, dict):
            raise ConfigurationError("Resources for %s should be a dictionary, found %s" % (name, vals))
        for key in ["memory", "cores", "scatter"]:
            if key in vals:
                val = vals[key]
                if isinstance(val, bool) or not isinstance(val, six.integer_types) or val < 0:
                    raise ConfigurationError("Resource %s for %s should be a non-negative integer, found %s"
                                             % (key, name, val))

def build_config(config=None):
    """Validate a configuration dictionary, returning an immutable PipelineConfig.

    Missing options fall back to DEFAULTS.
    """
    config = _merge_defaults(config)
    algorithm = config["algorithm"]
    _check_bools(algorithm)
    _check_ints(algorithm)
    _check_strings(algorithm)
    _check_resources(config["resources"])
    dbsnp = _as_file_list("dbsnp", config.get("dbsnp"))
    if not dbsnp:
        raise ConfigurationError("At least one dbSNP or known callset is required")
    if not config.get("reference"):
        raise ConfigurationError("A reference fasta file is required")
    return PipelineConfig(skip_qc=algorithm["skip_qc"],
                          do_post_recal=algorithm["do_post_recal"],
                          do_single_sample_calling=algorithm["do_single_sample_calling"],
                          quick=algorithm["quick"],
                          test_mode=algorithm["test_mode"],
                          default_platform=algorithm["default_platform"],
                          bwa_parameters=algorithm["bwa_parameters"],
                          base_fastq_path=algorithm["base_fastq_path"],
                          num_cores=algorithm["num_cores"],
                          scatter_count=algorithm["scatter_count"],
                          reference=config["reference"],
                          dbsnp=dbsnp,
                          indels=_as_file_list("indels", config.get("indels")),
                          targets=config.get("targets") or None,
                          baits=config.get("baits") or None,
                          known_sites=config.get("known_sites") or None,
                          contest_array_intervals=tz.get_in(["contest", "array_intervals"], config),
                          contest_pop_frequencies=tz.get_in(["contest", "pop_frequencies"], config),
                          programs=dict(config["programs"]),
                          resources=copy.deepcopy(config["resources"]),
                          upload=dict(config.get("upload") or {}))

def get_resources(name, config):
    """Retrieve resource hints for a task kind, falling back to defaults.
    """
    default = tz.get_in(["resources", "default"], config._asdict(), {})
    res = tz.merge(default, tz.get_in(["resources", name], config._asdict(), {}))
    cores = res.get("cores", config.num_cores if name in MULTICORE_KINDS else 1)
    scatter = res.get("scatter", config.scatter_count if name in SCATTER_KINDS else 0)
    return Resources(memory=res.get("memory", 1), cores=cores, scatter=scatter)

def get_program(name, config):
    """Retrieve the command line for an external program.
    """
    try:
        return config.programs[name]
    except KeyError:
        raise ConfigurationError("Program %s not configured under `programs`" % name)
