"""Build the task graph for tumor/normal BAM processing.

Processing steps are organized into the following modules:

  - run_info.py: Read lane metadata from a flat file or a remote LIMS.
  - sample.py: Group lanes into samples and validate the cohort.
  - tasks.py: Definitions of each kind of external tool invocation.
  - graph.py: Collect tasks and wire dependencies between them.
  - main.py: Lay out the alignment, cleaning, recalibration, QC and
             contamination stages for a cohort.
"""
