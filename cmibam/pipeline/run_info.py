"""Retrieve lane level metadata describing the sequencing inputs for a run.

Lanes come from one of two places: a flat comma separated metadata file
for local runs, or a LIMS service queried by individual for production.
Both return the same ordered list of LaneRecords.
"""
import collections
import datetime
import io
import os

import six

from cmibam.log import logger
from cmibam.pipeline.errors import MetadataFormatError

HEADER = "#FILE1,FILE2,INDIVIDUAL,SAMPLE,LIBRARY,SEQUENCING,TUMOR,PLATFORM,PLATFORM_UNIT,CENTER,DESCRIPTION,DATE_SEQUENCED"
NUM_FIELDS = 12

LaneRecord = collections.namedtuple(
    "LaneRecord",
    "id file1 file2 individual sample library sequencing tumor platform "
    "platform_unit center description date_sequenced")

# Read group PL values, keyed by alternative names seen in sequencing metadata
PLATFORMS = collections.OrderedDict([
    ("ILLUMINA", ["ILLUMINA", "SLX", "SOLEXA"]),
    ("SOLID", ["SOLID", "ABI_SOLID"]),
    ("LS454", ["LS454", "454"]),
    ("COMPLETE_GENOMICS", ["COMPLETE_GENOMICS", "COMPLETE"]),
    ("PACBIO", ["PACBIO"]),
    ("ION_TORRENT", ["ION_TORRENT"]),
    ("CAPILLARY", ["CAPILLARY"]),
    ("HELICOS", ["HELICOS"]),
    ("UNKNOWN", ["UNKNOWN"])])

def parse_platform(name, line=None):
    """Normalize a read group platform name, failing on unknown platforms.
    """
    if isinstance(name, six.string_types):
        test = name.strip().upper()
        for platform, aliases in PLATFORMS.items():
            if test in aliases:
                return platform
    raise MetadataFormatError("Unexpected sequencing platform %s. Supported: %s"
                              % (name, ", ".join(PLATFORMS.keys())), line)

# ## Naming based on lane metadata

def lane_bam_name(lane):
    """Coordinate sorted BAM for a single aligned lane.
    """
    return "%s.%s.%s.%s.%s.%s.bam" % (lane.individual, lane.sample, lane.library,
                                      lane.sequencing, lane.id, str(lane.tumor).lower())

def read_group_string(lane):
    return "@RG\tID:%d\tCN:%s\tDS:%s\tDT:%s\tLB:%s\tPL:%s\tPU:%s\tSM:%s" % (
        lane.id, lane.center, lane.description, lane.date_sequenced, lane.library,
        lane.platform, lane.platform_unit, lane.sample)

def is_paired(lane):
    return lane.file2 is not None

# ## Flat metadata file

def check_header(line):
    if line != HEADER:
        raise MetadataFormatError("Your header doesn't match the header this version of the pipeline "
                                  "is expecting.\n\tYour header: %s\n\t Our header: %s" % (line, HEADER))

def _lane_from_line(lane_id, line, base_fastq_path=""):
    parts = line.split(",")
    if len(parts) != NUM_FIELDS:
        raise MetadataFormatError("Expected %s comma separated fields, found %s"
                                  % (NUM_FIELDS, len(parts)), line)
    (file1, file2, individual, sample, library, sequencing, tumor, platform,
     platform_unit, center, description, date_sequenced) = parts
    if not file1:
        raise MetadataFormatError("Missing FILE1 read file", line)
    return LaneRecord(id=lane_id,
                      file1=base_fastq_path + file1,
                      file2=base_fastq_path + file2 if file2 else None,
                      individual=individual,
                      sample=sample,
                      library=library,
                      sequencing=sequencing,
                      tumor=tumor == "1",
                      platform=parse_platform(platform, line),
                      platform_unit=platform_unit,
                      center=center,
                      description=description,
                      date_sequenced=date_sequenced)

def lanes_from_lines(lines, base_fastq_path=""):
    """Parse metadata lines into lane records, validating header lines.
    """
    lanes = []
    for line in lines:
        line = line.rstrip("\r\n")
        if line.startswith("#"):
            check_header(line)
        elif line.strip():
            lanes.append(_lane_from_line(len(lanes) + 1, line, base_fastq_path))
    return lanes

def lanes_from_file(metadata_file, base_fastq_path=""):
    """Retrieve lanes from a comma separated metadata file.
    """
    try:
        with io.open(metadata_file, encoding="utf-8") as in_handle:
            lanes = lanes_from_lines(in_handle, base_fastq_path)
    except UnicodeDecodeError as e:
        raise MetadataFormatError("Metadata file %s is not valid UTF-8: %s" % (metadata_file, e))
    logger.info("Read %s lanes from metadata file %s" % (len(lanes), os.path.basename(metadata_file)))
    return lanes

# ## LIMS service

def _date_string(val):
    """Convert LIMS timestamps, in milliseconds since the epoch, into dates.
    """
    if isinstance(val, six.string_types) or val is None:
        return val or ""
    return datetime.datetime.fromtimestamp(val / 1000.0, datetime.timezone.utc).strftime("%Y-%m-%d")

def lanes_from_individual(individual, lims):
    """Retrieve lanes for all samples of an individual from a LIMS.

    lims -- any object providing `individual_samples(individual)`, returning
      the individual's name and a list of sample records. Each record yields
      its paired fastq files from `get_files("fastq")`.
    """
    name, samples = lims.individual_samples(individual)
    lanes = []
    for sample in samples:
        for files in sample.get_files("fastq"):
            file1, file2 = files[0], files[1] if len(files) > 1 else None
            lanes.append(LaneRecord(id=len(lanes) + 1,
                                    file1=file1,
                                    file2=file2 or None,
                                    individual=name,
                                    sample=sample.name,
                                    library=sample.library,
                                    sequencing=sample.sequencing,
                                    tumor=bool(sample.is_tumor),
                                    platform=parse_platform(sample.platform),
                                    platform_unit="",
                                    center=sample.center,
                                    description="",
                                    date_sequenced=_date_string(sample.date_sequenced)))
    logger.info("Retrieved %s lanes for individual %s from %s samples"
                % (len(lanes), individual, len(samples)))
    return lanes
