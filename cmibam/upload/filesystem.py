"""Write named outputs into a YAML manifest per individual in the output directory.
"""
import collections
import os

import yaml

from cmibam import utils
from cmibam.log import logger

class OutputManifest:
    """Collect published outputs, writing them on close.
    """
    def __init__(self, upload_config):
        if "dir" not in upload_config:
            raise ValueError("Expect `dir` in upload specification for filesystem outputs")
        self._dir = upload_config["dir"]
        self._outputs = collections.OrderedDict()

    def publish(self, individual, key, path):
        self._outputs.setdefault(individual, []).append({"key": key, "path": path})

    def get_upload_path(self, individual):
        return os.path.abspath(os.path.join(self._dir, "%s-outputs.yaml" % individual))

    def close(self):
        out_files = []
        if self._outputs:
            utils.safe_makedir(self._dir)
        for individual, outputs in self._outputs.items():
            out_file = self.get_upload_path(individual)
            with open(out_file, "w") as out_handle:
                yaml.safe_dump({"individual": individual, "outputs": outputs}, out_handle,
                               default_flow_style=False, allow_unicode=False)
            logger.info("Wrote %s outputs for %s to %s" % (len(outputs), individual, out_file))
            out_files.append(out_file)
        return out_files
