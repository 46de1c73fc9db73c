import mock
import pytest
import yaml

from cmibam import upload
from cmibam.pipeline import config_utils, sample
from cmibam.upload import filesystem


def _cohort(*samples):
    return sample.Cohort([sample.SampleGroup(name, ("%s.lane.bam" % name,), tumor)
                          for name, tumor in samples])


def test_category_outputs_from_sample_bam(config):
    outputs = upload.get_outputs("IND1", _cohort(("T1", True)), config)
    result = [(x.key, x.path) for x in outputs]
    assert result == [
        ("unreducedTumorBAM", "T1.clean.dedup.recal.bam"),
        ("unreducedTumorBAMIndex", "T1.clean.dedup.recal.bai"),
        ("reducedTumorBAM", "T1.clean.dedup.recal.reduced.bam"),
        ("reducedTumorBAMIndex", "T1.clean.dedup.recal.reduced.bai"),
        ("tumorHSMetrics", "T1.clean.dedup.recal.hs_metrics"),
        ("tumorGCMetrics", "T1.clean.dedup.recal.gc_metrics"),
        ("tumorInsertSizeMetrics", "T1.clean.dedup.recal.multipleMetrics.insert_size_metrics"),
        ("tumorAlignmentMetrics", "T1.clean.dedup.recal.multipleMetrics.alignment_summary_metrics"),
        ("tumorQualityByCycleMetrics", "T1.clean.dedup.recal.multipleMetrics.quality_by_cycle_metrics"),
        ("tumorQualityDistributionMetrics",
         "T1.clean.dedup.recal.multipleMetrics.quality_distribution_metrics"),
        ("tumorQualityDistributionMetrics", "T1.multipleMetrics.quality_distribution_metrics"),
        ("tumorDuplicateMetrics", "T1.duplicateMetrics")]
    assert all(x.individual == "IND1" for x in outputs)


def test_no_outputs_for_missing_category(config):
    outputs = upload.get_outputs("IND1", _cohort(("N1", False)), config)
    assert len(outputs) == 12
    assert all(x.key.lower().find("tumor") < 0 for x in outputs)
    assert not [x for x in outputs if "ContEst" in x.key]


def test_contamination_outputs_for_pair(config):
    outputs = upload.get_outputs("IND1", _cohort(("T1", True), ("N1", False)), config)
    contam = [(x.key, x.path) for x in outputs if "ContEst" in x.key]
    assert contam == [
        ("normalContEstMetrics", "N1.contamination.txt"),
        ("normalContEstValue", "N1.contamination.txt.firehose"),
        ("tumorContEstMetrics", "T1.contamination.txt"),
        ("tumorContEstValue", "T1.contamination.txt.firehose")]
    assert len(outputs) == 28


def test_calls_for_every_sample():
    config = config_utils.build_config({"algorithm": {"do_single_sample_calling": True}})
    outputs = upload.get_outputs("IND1", _cohort(("T1", True), ("N1", False)), config)
    calls = [x.path for x in outputs if x.key == "singleSampleVCF"]
    assert calls == ["T1.clean.dedup.recal.reduced.vcf", "N1.clean.dedup.recal.reduced.vcf"]
    assert len(outputs) == 32


def test_publish_calls_publisher():
    publisher = mock.Mock()
    outputs = [upload.Output("IND1", "reducedNormalBAM", "N1.clean.dedup.recal.reduced.bam")]
    upload.publish(outputs, publisher)
    publisher.publish.assert_called_once_with("IND1", "reducedNormalBAM", "N1.clean.dedup.recal.reduced.bam")
    publisher.close.assert_called_once_with()


@pytest.mark.parametrize(('upload_config', 'expected'), [
    ({}, upload.LogPublisher),
    ({"method": "log"}, upload.LogPublisher),
    ({"method": "filesystem", "dir": "final"}, filesystem.OutputManifest),
])
def test_get_publisher(upload_config, expected):
    config = config_utils.build_config({"upload": upload_config})
    assert isinstance(upload.get_publisher(config), expected)


def test_get_publisher_unknown_method():
    config = config_utils.build_config({"upload": {"method": "s3"}})
    with pytest.raises(ValueError):
        upload.get_publisher(config)


def test_filesystem_requires_dir():
    with pytest.raises(ValueError):
        filesystem.OutputManifest({"method": "filesystem"})


def test_filesystem_manifest(tmp_path):
    manifest = filesystem.OutputManifest({"dir": str(tmp_path / "final")})
    manifest.publish("IND1", "normalQualityDistributionMetrics", "a")
    manifest.publish("IND1", "normalQualityDistributionMetrics", "b")
    out_files = manifest.close()
    assert out_files == [str(tmp_path / "final" / "IND1-outputs.yaml")]
    with open(out_files[0]) as in_handle:
        result = yaml.safe_load(in_handle)
    assert result == {"individual": "IND1",
                      "outputs": [{"key": "normalQualityDistributionMetrics", "path": "a"},
                                  {"key": "normalQualityDistributionMetrics", "path": "b"}]}
