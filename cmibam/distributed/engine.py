"""Serialize the processing graph for an external scheduler.

YamlQueue implements the engine `declare(task)` interface by collecting
tasks and writing them as a YAML job description, keeping dependency
edges so the scheduler can order and parallelize execution.
"""
import os

import yaml

from cmibam import utils
from cmibam.log import logger

def task_to_dict(task):
    return {"kind": task.kind,
            "name": task.name,
            "inputs": list(task.inputs),
            "outputs": list(task.outputs),
            "resources": dict(task.resources._asdict()),
            "intermediate": task.intermediate,
            "args": dict(task.args),
            "depends_on": list(task.depends_on)}

def tasks_to_dicts(tasks):
    return [task_to_dict(x) for x in tasks]

class YamlQueue:
    def __init__(self):
        self.tasks = []

    def declare(self, task):
        self.tasks.append(task)

    def write(self, out_file):
        utils.safe_makedir(os.path.dirname(out_file))
        with open(out_file, "w") as out_handle:
            yaml.safe_dump({"tasks": tasks_to_dicts(self.tasks)}, out_handle,
                           default_flow_style=False, allow_unicode=False)
        logger.info("Wrote %s tasks to %s" % (len(self.tasks), out_file))
        return out_file
