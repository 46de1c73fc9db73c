"""Collect tasks into a dependency graph ready for an execution engine.

Tasks are added in an order where producers come before consumers. Each
added task gets a dependency on every earlier task producing one of its
inputs. Nothing reaches the engine until the whole graph is built.
"""
import collections

from cmibam.log import logger, logger_cl
from cmibam.pipeline import tasks
from cmibam.pipeline.errors import DuplicateArtifactError, PipelineSetupError

class TaskGraph:
    def __init__(self):
        self._tasks = collections.OrderedDict()
        self._producers = {}

    def add(self, *new_tasks):
        """Attach dependency edges to tasks and store them in the graph.

        Returns the tasks with `depends_on` filled in.
        """
        out = []
        for task in new_tasks:
            if task.kind not in tasks.KINDS:
                raise PipelineSetupError("Unexpected task kind %s for %s" % (task.kind, task.name))
            if task.name in self._tasks:
                raise PipelineSetupError("Task %s declared twice" % task.name)
            for fname in task.outputs:
                if fname in self._producers:
                    raise DuplicateArtifactError(fname, self._producers[fname], task.name)
            depends_on = []
            for fname in task.inputs:
                producer = self._producers.get(fname)
                if producer and producer not in depends_on:
                    depends_on.append(producer)
            task = task._replace(depends_on=tuple(depends_on))
            for fname in task.outputs:
                self._producers[fname] = task.name
            self._tasks[task.name] = task
            out.append(task)
        return out

    @property
    def tasks(self):
        return list(self._tasks.values())

    def get(self, name):
        return self._tasks[name]

    def producer(self, fname):
        """Task producing a file, or None for pipeline inputs.
        """
        name = self._producers.get(fname)
        return self._tasks[name] if name else None

    def by_kind(self, kind):
        return [x for x in self._tasks.values() if x.kind == kind]

    def __len__(self):
        return len(self._tasks)

    def declare(self, engine):
        """Hand every task to the execution engine, producers first.
        """
        for task in self._tasks.values():
            if "command_line" in task.args:
                logger_cl.debug("%s: %s" % (task.name, task.args["command_line"]))
            engine.declare(task)
        logger.info("Declared %s tasks" % len(self._tasks))
