"""Definitions of the external tool invocations making up the processing graph.

Each kind of task is an immutable Task value produced by a small builder
function below. Builders only assemble inputs, outputs, resource hints and
tool parameters; the tools themselves are run by the external execution
engine. The `kind` tag identifies the tool and determines resources and
whether outputs are intermediate.
"""
import collections
import os

from cmibam import utils
from cmibam.pipeline import config_utils
from cmibam.pipeline.errors import JointRealignmentCapacityError

Task = collections.namedtuple("Task", "kind name inputs outputs resources intermediate args depends_on")

# Output files tracked by a single joint indel realignment
JOINT_REALIGN_CAPACITY = 5

# Tasks producing final, publishable outputs; everything else can be cleaned up
FINAL_KINDS = set(["dedup", "apply_bqsr", "reduce", "call",
                   "hs_metrics", "gc_metrics", "multiple_metrics", "contest"])

COVARIATES = ["ReadGroupCovariate", "QualityScoreCovariate", "CycleCovariate", "ContextCovariate"]

def t(kind, name, inputs, outputs, config, args=None):
    """Represent a single task in the processing graph.

    kind -- The tool being run, used to look up resources and cleanup behavior.
    name -- Unique job name, derived from the primary output.
    inputs -- Files the task reads. Tasks producing them become dependencies.
    outputs -- Files the task writes.
    config -- PipelineConfig, for resource hints.
    args -- Tool parameters passed unchanged to the execution engine.
    """
    return Task(kind, name, tuple(inputs), tuple(outputs),
                config_utils.get_resources(kind, config),
                kind not in FINAL_KINDS, args or {}, ())

def _known_sites(config):
    return list(config.dbsnp) + list(config.indels)

def _quick_intervals(config):
    return [config.targets] if config.quick and config.targets else []

# ## Alignment

def bwa_aln(in_fastq, out_sai, config):
    res = config_utils.get_resources("bwa_aln", config)
    cl = "%s aln -t %s%s%s %s > %s" % (config_utils.get_program("bwa", config), res.cores,
                                       config.bwa_parameters, config.reference, in_fastq, out_sai)
    return t("bwa_aln", out_sai + ".bwa_aln_se", [in_fastq], [out_sai], config,
             {"command_line": cl})

def bwa_sampe(in_file1, in_file2, in_sai1, in_sai2, out_sam, read_group, config):
    cl = '%s sampe %s %s %s %s %s -r "%s" > %s' % (config_utils.get_program("bwa", config), config.reference,
                                                   in_sai1, in_sai2, in_file1, in_file2, read_group, out_sam)
    return t("bwa_sampe", out_sam + ".bwa_sam_pe", [in_file1, in_file2, in_sai1, in_sai2], [out_sam],
             config, {"command_line": cl, "read_group": read_group})

def bwa_samse(in_file, in_sai, out_sam, read_group, config):
    cl = '%s samse %s %s %s -r "%s" > %s' % (config_utils.get_program("bwa", config), config.reference,
                                             in_sai, in_file, read_group, out_sam)
    return t("bwa_samse", out_sam + ".bwa_sam_se", [in_file, in_sai], [out_sam],
             config, {"command_line": cl, "read_group": read_group})

def sort_sam(in_sam, out_bam, config, sort_order="coordinate"):
    return t("sort_sam", out_bam + ".sortSam", [in_sam], [out_bam], config,
             {"sort_order": sort_order, "max_records_in_ram": 100000})

def merge(in_bams, out_bam, config):
    return t("merge", out_bam + ".joinBAMs", in_bams, [out_bam], config,
             {"max_records_in_ram": 100000})

# ## Joint cleaning

def target(in_bams, out_intervals, config):
    return t("target", out_intervals + ".target", in_bams, [out_intervals], config,
             {"reference": config.reference,
              "known": _known_sites(config),
              "mismatch_fraction": 0.0,
              "intervals": [config.targets] if config.targets else []})

def cleaned_bam(in_bam):
    return utils.swap_ext(in_bam, ".bam", ".clean.bam")

def indel(in_bams, target_intervals, config):
    """Joint indel realignment over all sample BAMs.

    Produces a cleaned BAM and index per input, up to the number of
    output files realignment can track in a single run.
    """
    in_bams = list(in_bams)
    if len(in_bams) > JOINT_REALIGN_CAPACITY:
        raise JointRealignmentCapacityError(in_bams, JOINT_REALIGN_CAPACITY)
    outputs = []
    for in_bam in in_bams:
        outputs.extend([cleaned_bam(in_bam), utils.bam_index(cleaned_bam(in_bam))])
    args = {"reference": config.reference,
            "target_intervals": target_intervals,
            "known": _known_sites(config),
            "consensus_determination_model": "USE_READS",
            "compress": 0,
            "no_pg_tag": config.test_mode}
    if len(in_bams) == 1:
        args["out"] = outputs[0]
    else:
        args["n_way_out"] = ".clean.bam"
    return t("indel", in_bams[0] + ".clean", in_bams + [target_intervals], outputs, config, args)

# ## Per sample processing

def dedup(in_bam, out_bam, metrics_file, config):
    return t("dedup", out_bam + ".dedup", [in_bam], [out_bam, metrics_file], config,
             {"assume_sorted": True, "max_records_in_ram": 100000})

def bqsr(in_bam, out_recal_file, config):
    args = {"reference": config.reference,
            "known_sites": list(config.dbsnp),
            "covariates": list(COVARIATES),
            "disable_indel_quals": True,
            "intervals": _quick_intervals(config)}
    if config.default_platform:
        args["default_platform"] = config.default_platform
    return t("bqsr", out_recal_file + ".covariates", [in_bam], [out_recal_file], config, args)

def apply_bqsr(in_bam, in_recal_file, out_bam, config):
    return t("apply_bqsr", out_bam + ".recalibration", [in_bam, in_recal_file], [out_bam], config,
             {"reference": config.reference,
              "bqsr": in_recal_file,
              "baq": "CALCULATE_AS_NECESSARY",
              "intervals": _quick_intervals(config)})

def reduce_reads(in_bam, out_bam, config):
    return t("reduce", out_bam + ".reduce", [in_bam], [out_bam], config,
             {"reference": config.reference,
              "intervals": _quick_intervals(config)})

def call(in_bam, out_vcf, config):
    """Single sample genotyping at known sites, restricted to capture targets.
    """
    return t("call", out_vcf + ".singleSampleCalling", [in_bam], utils.file_plus_index(out_vcf), config,
             {"reference": config.reference,
              "dbsnp": config.dbsnp[0],
              "downsample_to_coverage": 600,
              "genotype_likelihoods_model": "BOTH",
              "output_mode": "EMIT_ALL_SITES",
              "genotyping_mode": "GENOTYPE_GIVEN_ALLELES",
              "alleles": config.known_sites,
              "intervals": [config.targets] if config.targets else []})

# ## Quality control

def _picard_jar(name, config):
    return os.path.join(config_utils.get_program("picard", config), "%s.jar" % name)

def hs_metrics(in_bam, out_file, config):
    return t("hs_metrics", out_file + ".hsMetrics", [in_bam], [out_file], config,
             {"reference": config.reference,
              "targets": config.targets,
              "baits": config.baits,
              "jar": _picard_jar("CalculateHsMetrics", config)})

def gc_metrics(in_bam, out_file, config):
    return t("gc_metrics", in_bam + ".gcMetrics", [in_bam], [out_file], config,
             {"reference": config.reference,
              "jar": _picard_jar("CollectGcBiasMetrics", config)})

def multiple_metrics(in_bam, out_file, config):
    return t("multiple_metrics", in_bam + ".multipleMetrics", [in_bam], [out_file], config,
             {"reference": config.reference,
              "jar": _picard_jar("CollectMultipleMetrics", config)})

def contest(in_bam, normal_bam, config):
    """Estimate contamination of a BAM, bootstrapping genotypes from the normal.
    """
    out_contam = utils.swap_ext(in_bam, ".bam", ".contamination.txt")
    out_value = utils.swap_ext(in_bam, ".bam", ".contamination.txt.firehose")
    cl = ("%s -reference %s -interval %s -array none -faf true  -bam %s -nbam %s "
          "-array_interval %s -pop %s -out %s -run" %
          (config_utils.get_program("contest", config), config.reference, config.targets,
           in_bam, normal_bam, config.contest_array_intervals, config.contest_pop_frequencies,
           out_contam))
    return t("contest", out_contam + ".ContEst", [in_bam, normal_bam], [out_contam, out_value], config,
             {"command_line": cl})

KINDS = {"bwa_aln": bwa_aln, "bwa_sampe": bwa_sampe, "bwa_samse": bwa_samse,
         "sort_sam": sort_sam, "merge": merge, "target": target, "indel": indel,
         "dedup": dedup, "bqsr": bqsr, "apply_bqsr": apply_bqsr, "reduce": reduce_reads,
         "call": call, "hs_metrics": hs_metrics, "gc_metrics": gc_metrics,
         "multiple_metrics": multiple_metrics, "contest": contest}
