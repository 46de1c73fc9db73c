"""Main entry point for building the tumor/normal BAM processing graph.

Lays out the full set of tasks for a cohort: per lane alignment, per
sample merging, joint indel cleaning across samples, per sample
deduplication, recalibration, reduction and optional calling, QC metrics
and tumor/normal contamination estimates. Construction either completes
or raises before anything is declared to the engine or published.
"""
import collections
import os

from cmibam import log, upload, utils
from cmibam.distributed.engine import YamlQueue
from cmibam.log import logger
from cmibam.pipeline import config_utils, run_info, sample, tasks
from cmibam.pipeline.errors import PipelineSetupError
from cmibam.pipeline.graph import TaskGraph

PipelineGraph = collections.namedtuple("PipelineGraph", "individual cohort graph outputs")

def run_main(config_file, metadata=None, individual=None, lims=None, out_file=None):
    """Build the processing graph for an individual, writing it for the scheduler.

    Lanes come from a metadata file or, when only an individual is given,
    from the LIMS.
    """
    raw_config = config_utils.load_config(config_file)
    log.setup_local_logging(raw_config)
    config = config_utils.build_config(raw_config)
    logger.info("Configuration: %s" % os.path.abspath(config_file))
    if metadata:
        lanes = run_info.lanes_from_file(metadata, config.base_fastq_path)
    elif individual and lims:
        lanes = run_info.lanes_from_individual(individual, lims)
    else:
        raise PipelineSetupError("Need either a metadata file or an individual and LIMS to retrieve lanes")
    pipeline = build_graph(lanes, config, individual)
    engine = YamlQueue()
    run_graph(pipeline, engine, upload.get_publisher(config))
    if out_file is None:
        out_file = "%s-graph.yaml" % pipeline.individual
    return engine.write(os.path.abspath(out_file))

def run_graph(pipeline, engine, publisher):
    """Declare a fully built graph to the execution engine and publish its outputs.
    """
    pipeline.graph.declare(engine)
    upload.publish(pipeline.outputs, publisher)

def build_graph(lanes, config, individual=None):
    """Build every task and output for a set of lanes.

    lanes -- ordered LaneRecords, from run_info.
    config -- validated PipelineConfig.
    individual -- name to publish outputs under, defaulting to the lanes' individual.
    """
    if not lanes:
        raise PipelineSetupError("No lanes found to process")
    if individual is None:
        individual = lanes[0].individual
    graph = TaskGraph()
    cohort = sample.group_samples(lanes, lambda lane: _align_lane(lane, config, graph))
    bams = _merge_samples(cohort, config, graph)
    _clean(bams, config, graph)
    for bam in bams:
        files = sample.sample_files(bam)
        _process_sample(files, config, graph)
        _qc_metrics(files, config, graph)
        _single_sample_call(files, config, graph)
    _contamination(cohort, config, graph)
    outputs = upload.get_outputs(individual, cohort, config)
    logger.info("Built %s tasks and %s outputs for %s" % (len(graph), len(outputs), individual))
    return PipelineGraph(individual, cohort, graph, outputs)

# ## Alignment and merging

def _align_lane(lane, config, graph):
    """BWA alignment for a lane, paired end or not, to a coordinate sorted BAM.
    """
    sai1 = os.path.basename(lane.file1) + ".1.sai"
    aln_sam = os.path.basename(lane.file1) + ".sam"
    aln_bam = run_info.lane_bam_name(lane)
    read_group = run_info.read_group_string(lane)
    graph.add(tasks.bwa_aln(lane.file1, sai1, config))
    if run_info.is_paired(lane):
        sai2 = os.path.basename(lane.file2) + ".2.sai"
        graph.add(tasks.bwa_aln(lane.file2, sai2, config),
                  tasks.bwa_sampe(lane.file1, lane.file2, sai1, sai2, aln_sam, read_group, config))
    else:
        graph.add(tasks.bwa_samse(lane.file1, sai1, aln_sam, read_group, config))
    graph.add(tasks.sort_sam(aln_sam, aln_bam, config))
    return aln_bam

def _merge_samples(cohort, config, graph):
    bams = []
    for x in cohort.samples:
        bam = sample.sample_bam(x.name)
        graph.add(tasks.merge(x.lane_bams, bam, config))
        bams.append(bam)
    return bams

def _clean(bams, config, graph):
    """Joint indel realignment across all samples.
    """
    target_intervals = utils.swap_ext(bams[0], ".bam", ".cleaning.interval_list")
    graph.add(tasks.target(bams, target_intervals, config),
              tasks.indel(bams, target_intervals, config))

# ## Per sample processing

def _process_sample(files, config, graph):
    graph.add(tasks.dedup(files.clean, files.dedup, files.duplicate_metrics, config),
              tasks.bqsr(files.dedup, files.pre_recal, config),
              tasks.apply_bqsr(files.dedup, files.pre_recal, files.recal, config))
    if config.do_post_recal:
        graph.add(tasks.bqsr(files.recal, files.post_recal, config))
    graph.add(tasks.reduce_reads(files.recal, files.reduced, config))

def _qc_metrics(files, config, graph):
    """Metrics on the recalibrated BAM, independent of reduction.
    """
    if config.skip_qc:
        logger.info("Skipping QC metrics for %s" % files.bam)
        return
    if config.targets and config.baits:
        graph.add(tasks.hs_metrics(files.recal, files.hs_metrics, config))
    else:
        logger.info("No targets and baits configured; skipping hybrid selection metrics for %s" % files.bam)
    graph.add(tasks.gc_metrics(files.recal, files.gc_metrics, config),
              tasks.multiple_metrics(files.recal, files.multiple_metrics, config))

def _single_sample_call(files, config, graph):
    if config.do_single_sample_calling:
        graph.add(tasks.call(files.reduced, files.vcf, config))

def _contamination(cohort, config, graph):
    """Contamination of tumor and normal, both genotyped from the normal sample.
    """
    if not (cohort.has_tumor() and cohort.has_normal()):
        logger.info("Contamination estimates need tumor and normal samples, skipping for %s" % cohort)
        return
    tumor_bam = sample.sample_files(cohort.category_bam(True)).recal
    normal_bam = sample.sample_files(cohort.category_bam(False)).recal
    graph.add(tasks.contest(tumor_bam, normal_bam, config),
              tasks.contest(normal_bam, normal_bam, config))
