import yaml

from cmibam.distributed import engine
from cmibam.pipeline import tasks
from cmibam.pipeline.graph import TaskGraph


def test_write_declared_tasks(tmp_path, config):
    graph = TaskGraph()
    graph.add(tasks.merge(["a.bam", "b.bam"], "S.bam", config),
              tasks.bqsr("S.bam", "S.table", config))
    queue = engine.YamlQueue()
    graph.declare(queue)
    out_file = queue.write(str(tmp_path / "out" / "graph.yaml"))
    with open(out_file) as in_handle:
        result = yaml.safe_load(in_handle)
    assert [x["name"] for x in result["tasks"]] == ["S.bam.joinBAMs", "S.table.covariates"]
    bqsr = result["tasks"][1]
    assert bqsr["depends_on"] == ["S.bam.joinBAMs"]
    assert bqsr["resources"] == {"memory": 4, "cores": 4, "scatter": 0}
    assert bqsr["intermediate"] is True
    assert bqsr["args"]["covariates"][0] == "ReadGroupCovariate"
