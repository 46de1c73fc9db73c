"""Group aligned lanes into samples and validate tumor/normal composition.
"""
import collections

from cmibam import utils
from cmibam.log import logger
from cmibam.pipeline.errors import InconsistentTumorStatusError, UnsupportedCohortSizeError

# Maximum samples of each tumor/normal category processed in one run
MAX_PER_CATEGORY = 1

SampleGroup = collections.namedtuple("SampleGroup", "name lane_bams tumor")

def sample_bam(name):
    """Merged BAM file for all lanes of a sample.
    """
    return "%s.bam" % name

class Cohort:
    """Samples processed together, split into tumor and normal categories.
    """
    def __init__(self, samples):
        self.samples = list(samples)

    @property
    def tumor(self):
        return [x for x in self.samples if x.tumor]

    @property
    def normal(self):
        return [x for x in self.samples if not x.tumor]

    def has_tumor(self):
        return len(self.tumor) > 0

    def has_normal(self):
        return len(self.normal) > 0

    def category_bam(self, tumor):
        """Merged BAM for the single sample in a tumor or normal category.
        """
        xs = self.tumor if tumor else self.normal
        return sample_bam(xs[0].name) if xs else None

    def __len__(self):
        return len(self.samples)

    def __repr__(self):
        return "Cohort(tumor=%s, normal=%s)" % ([x.name for x in self.tumor],
                                                [x.name for x in self.normal])

def _group_lanes(lanes, align_fn):
    """Group lane alignments by sample, preserving lane and sample order.
    """
    bams = collections.OrderedDict()
    tumor_info = {}
    for lane in lanes:
        bams.setdefault(lane.sample, []).append(align_fn(lane))
        if lane.sample in tumor_info:
            if lane.tumor != tumor_info[lane.sample]:
                raise InconsistentTumorStatusError(lane.sample, lane.tumor, tumor_info[lane.sample])
        else:
            tumor_info[lane.sample] = lane.tumor
    return [SampleGroup(name, tuple(xs), tumor_info[name]) for name, xs in bams.items()]

def _check_cohort_size(samples):
    normal, tumor = utils.partition(lambda x: x.tumor, samples, tolist=True)
    if len(tumor) > MAX_PER_CATEGORY or len(normal) > MAX_PER_CATEGORY:
        raise UnsupportedCohortSizeError([x.name for x in tumor], [x.name for x in normal])

def group_samples(lanes, align_fn):
    """Aggregate lanes into a validated Cohort.

    align_fn is called on every lane in order and returns the aligned
    BAM for that lane.
    """
    samples = _group_lanes(lanes, align_fn)
    _check_cohort_size(samples)
    cohort = Cohort(samples)
    logger.info("Grouped %s lanes into %s samples: %s" % (len(lanes), len(cohort), cohort))
    return cohort

SampleFiles = collections.namedtuple(
    "SampleFiles",
    "bam clean clean_index dedup duplicate_metrics pre_recal post_recal recal "
    "reduced vcf hs_metrics gc_metrics multiple_metrics")

def sample_files(bam):
    """Derived files for every processing stage of a merged sample BAM.
    """
    recal = utils.swap_ext(bam, ".bam", ".clean.dedup.recal.bam")
    reduced = utils.swap_ext(bam, ".bam", ".clean.dedup.recal.reduced.bam")
    return SampleFiles(bam=bam,
                       clean=utils.swap_ext(bam, ".bam", ".clean.bam"),
                       clean_index=utils.swap_ext(bam, ".bam", ".clean.bai"),
                       dedup=utils.swap_ext(bam, ".bam", ".clean.dedup.bam"),
                       duplicate_metrics=utils.swap_ext(bam, ".bam", ".duplicateMetrics"),
                       pre_recal=utils.swap_ext(bam, ".bam", ".pre_recal.table"),
                       post_recal=utils.swap_ext(bam, ".bam", ".post_recal.table"),
                       recal=recal,
                       reduced=reduced,
                       vcf=utils.swap_ext(reduced, ".bam", ".vcf"),
                       hs_metrics=utils.swap_ext(recal, ".bam", ".hs_metrics"),
                       gc_metrics=utils.swap_ext(recal, ".bam", ".gc_metrics"),
                       multiple_metrics=utils.swap_ext(recal, ".bam", ".multipleMetrics"))
