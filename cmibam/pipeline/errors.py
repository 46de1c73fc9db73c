"""Validation errors raised while building the processing graph.

Every error here is detected during construction, before any task is
declared to the execution engine or any output is published.
"""

class PipelineSetupError(ValueError):
    pass

class ConfigurationError(PipelineSetupError):
    pass

class MetadataFormatError(PipelineSetupError):
    """Metadata header or lane line that cannot be parsed.
    """
    def __init__(self, msg, line=None):
        self.line = line
        if line is not None:
            msg = "%s\n\tOffending line: %s" % (msg, line)
        super(MetadataFormatError, self).__init__(msg)

class InconsistentTumorStatusError(PipelineSetupError):
    def __init__(self, sample, observed, stored):
        self.sample = sample
        self.observed = observed
        self.stored = stored
        super(InconsistentTumorStatusError, self).__init__(
            "Tumor type for sample %s is internally inconsistent within metadata. "
            "Found %s and %s" % (sample, observed, stored))

class UnsupportedCohortSizeError(PipelineSetupError):
    """More than one tumor or more than one normal sample in a run.
    """
    def __init__(self, tumor_samples, normal_samples):
        self.tumor_samples = list(tumor_samples)
        self.normal_samples = list(normal_samples)
        problems = []
        if len(self.tumor_samples) > 1:
            problems.append("tumor samples: %s" % ", ".join(self.tumor_samples))
        if len(self.normal_samples) > 1:
            problems.append("normal samples: %s" % ", ".join(self.normal_samples))
        super(UnsupportedCohortSizeError, self).__init__(
            "Bad inputs to processing pipeline. Only one tumor and one normal sample "
            "currently supported; found %s" % "; ".join(problems))

    @property
    def samples(self):
        out = []
        if len(self.tumor_samples) > 1:
            out.extend(self.tumor_samples)
        if len(self.normal_samples) > 1:
            out.extend(self.normal_samples)
        return out

class JointRealignmentCapacityError(PipelineSetupError):
    def __init__(self, samples, capacity):
        self.samples = list(samples)
        self.capacity = capacity
        super(JointRealignmentCapacityError, self).__init__(
            "Joint indel realignment handles at most %s samples, got %s: %s"
            % (capacity, len(self.samples), ", ".join(self.samples)))

class DuplicateArtifactError(PipelineSetupError):
    def __init__(self, artifact, producer, task):
        self.artifact = artifact
        self.producer = producer
        self.task = task
        super(DuplicateArtifactError, self).__init__(
            "Output %s of %s is already produced by %s" % (artifact, task, producer))
