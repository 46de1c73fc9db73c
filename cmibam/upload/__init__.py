"""Report final files from a processing run as named outputs of an individual.

Outputs are a fixed table of keys per tumor/normal category, plus single
sample calls when requested. Each is handed to a publisher exposing
`publish(individual, key, path)`.
"""
import collections

from cmibam import utils
from cmibam.log import logger
from cmibam.pipeline import sample
from cmibam.upload import filesystem

Output = collections.namedtuple("Output", "individual key path")

# Output keys per category, with the suffix swapped onto the category sample BAM
CATEGORY_OUTPUTS = [
    ("unreduced{Cat}BAM", ".clean.dedup.recal.bam"),
    ("unreduced{Cat}BAMIndex", ".clean.dedup.recal.bai"),
    ("reduced{Cat}BAM", ".clean.dedup.recal.reduced.bam"),
    ("reduced{Cat}BAMIndex", ".clean.dedup.recal.reduced.bai"),
    ("{cat}HSMetrics", ".clean.dedup.recal.hs_metrics"),
    ("{cat}GCMetrics", ".clean.dedup.recal.gc_metrics"),
    ("{cat}InsertSizeMetrics", ".clean.dedup.recal.multipleMetrics.insert_size_metrics"),
    ("{cat}AlignmentMetrics", ".clean.dedup.recal.multipleMetrics.alignment_summary_metrics"),
    ("{cat}QualityByCycleMetrics", ".clean.dedup.recal.multipleMetrics.quality_by_cycle_metrics"),
    ("{cat}QualityDistributionMetrics", ".clean.dedup.recal.multipleMetrics.quality_distribution_metrics"),
    ("{cat}QualityDistributionMetrics", ".multipleMetrics.quality_distribution_metrics"),
    ("{cat}DuplicateMetrics", ".duplicateMetrics")]

# Contamination outputs, only available for a tumor/normal pair
CONTAMINATION_OUTPUTS = [
    ("{cat}ContEstMetrics", ".contamination.txt"),
    ("{cat}ContEstValue", ".contamination.txt.firehose")]

class LogPublisher:
    """Report outputs through the pipeline log only.
    """
    def __init__(self, upload_config=None):
        pass

    def publish(self, individual, key, path):
        logger.info("Output for %s: %s %s" % (individual, key, path))

_approaches = {"filesystem": filesystem.OutputManifest,
               "log": LogPublisher}

def get_publisher(config):
    """Retrieve the publisher configured under `upload`, defaulting to the log.
    """
    upload_config = config.upload or {}
    method = upload_config.get("method", "log")
    if method not in _approaches:
        raise ValueError("Unexpected upload method %s. Supported: %s"
                         % (method, ", ".join(sorted(_approaches.keys()))))
    return _approaches[method](upload_config)

# ## Outputs from a cohort

def _maybe_add_category(individual, cohort, tumor, out):
    bam = cohort.category_bam(tumor)
    if bam:
        cat = "tumor" if tumor else "normal"
        to_add = list(CATEGORY_OUTPUTS)
        if cohort.has_tumor() and cohort.has_normal():
            to_add.extend(CONTAMINATION_OUTPUTS)
        for key, ext in to_add:
            out.append(Output(individual, key.format(Cat=cat.capitalize(), cat=cat),
                              utils.swap_ext(bam, ".bam", ext)))
    return out

def _maybe_add_calls(individual, cohort, config, out):
    if config.do_single_sample_calling:
        for x in cohort.samples:
            vcf, vcf_index = utils.file_plus_index(sample.sample_files(sample.sample_bam(x.name)).vcf)
            out.append(Output(individual, "singleSampleVCF", vcf))
            out.append(Output(individual, "singleSampleVCFIndex", vcf_index))
    return out

def get_outputs(individual, cohort, config):
    """Named outputs available for an individual after processing a cohort.
    """
    out = []
    out = _maybe_add_calls(individual, cohort, config, out)
    out = _maybe_add_category(individual, cohort, False, out)
    out = _maybe_add_category(individual, cohort, True, out)
    return out

def publish(outputs, publisher):
    for x in outputs:
        publisher.publish(x.individual, x.key, x.path)
    if hasattr(publisher, "close"):
        publisher.close()
    logger.info("Published %s outputs" % len(outputs))
