"""Pytest fixtures and test helper functions"""

import pytest

from cmibam.pipeline import config_utils, run_info

HEADER = run_info.HEADER

def _make_lane(lane_id, sample, tumor=False, file2="", individual="IND1"):
    """Build a lane record for a sample, paired end unless file2 is None."""
    if file2 == "":
        file2 = "%s_%s_2.fastq" % (sample, lane_id)
    return run_info.LaneRecord(id=lane_id,
                               file1="%s_%s_1.fastq" % (sample, lane_id),
                               file2=file2,
                               individual=individual,
                               sample=sample,
                               library="LIB-%s" % sample,
                               sequencing="SEQ1",
                               tumor=tumor,
                               platform="ILLUMINA",
                               platform_unit="PU%s" % lane_id,
                               center="CTR1",
                               description="desc",
                               date_sequenced="2020-01-01")

@pytest.fixture
def config():
    return config_utils.build_config({})

@pytest.fixture
def write_metadata(tmp_path):
    """Write lines to a metadata file, returning its path"""
    def _write(lines, header=HEADER):
        out_file = tmp_path / "metadata.csv"
        out_file.write_text("\n".join(([header] if header else []) + list(lines)) + "\n")
        return str(out_file)
    return _write

@pytest.fixture
def make_lane():
    return _make_lane
