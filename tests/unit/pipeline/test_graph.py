import mock
import pytest

from cmibam.pipeline import tasks
from cmibam.pipeline.errors import DuplicateArtifactError, PipelineSetupError
from cmibam.pipeline.graph import TaskGraph


def test_dependencies_from_producers(config):
    graph = TaskGraph()
    graph.add(tasks.merge(["a.bam", "b.bam"], "S.bam", config))
    bqsr, apply_bqsr = graph.add(tasks.bqsr("S.bam", "S.table", config),
                                 tasks.apply_bqsr("S.bam", "S.table", "S.recal.bam", config))
    assert bqsr.depends_on == ("S.bam.joinBAMs",)
    assert apply_bqsr.depends_on == ("S.bam.joinBAMs", "S.table.covariates")
    assert graph.producer("S.table") == bqsr
    assert graph.producer("a.bam") is None
    assert len(graph) == 3


def test_duplicate_output_rejected(config):
    graph = TaskGraph()
    graph.add(tasks.bqsr("S.bam", "S.table", config))
    with pytest.raises(DuplicateArtifactError) as excinfo:
        graph.add(tasks.bqsr("S.recal.bam", "S.table", config)._replace(name="other"))
    assert excinfo.value.artifact == "S.table"
    assert excinfo.value.producer == "S.table.covariates"


def test_duplicate_name_rejected(config):
    graph = TaskGraph()
    task = tasks.merge(["a.bam"], "S.bam", config)
    graph.add(task)
    with pytest.raises(PipelineSetupError):
        graph.add(task._replace(outputs=("other.bam",)))


def test_unknown_kind_rejected(config):
    graph = TaskGraph()
    with pytest.raises(PipelineSetupError):
        graph.add(tasks.merge(["a.bam"], "S.bam", config)._replace(kind="bwasw"))


def test_declare_in_order(config):
    graph = TaskGraph()
    graph.add(tasks.merge(["a.bam"], "S.bam", config),
              tasks.bqsr("S.bam", "S.table", config))
    engine = mock.Mock()
    graph.declare(engine)
    assert [c[0][0].name for c in engine.declare.call_args_list] == \
        ["S.bam.joinBAMs", "S.table.covariates"]


def test_declare_logs_command_lines(config, mocker):
    logger_cl = mocker.patch("cmibam.pipeline.graph.logger_cl")
    graph = TaskGraph()
    graph.add(tasks.bwa_aln("a.fq", "a.fq.1.sai", config),
              tasks.merge(["a.bam"], "S.bam", config))
    graph.declare(mock.Mock())
    assert logger_cl.debug.call_count == 1
    message = logger_cl.debug.call_args[0][0]
    assert message.startswith("a.fq.1.sai.bwa_aln_se: ")
    assert "aln" in message and "a.fq" in message
