#!/usr/bin/env python -Es
"""Build the tumor/normal BAM processing graph for an individual.

Lanes are read from a comma separated metadata file, or retrieved for an
individual from a LIMS. The declared tasks are written as YAML for the
external scheduler and named outputs are reported to the configured
upload method.

Usage:
  cmibam_pipeline.py <config_file> --metadata <metadata.csv>
  cmibam_pipeline.py <config_file> --individual <id> --lims-url <url> --lims-key <key>
"""
import argparse
import sys

from cmibam.lims.api import LimsApiAccess
from cmibam.pipeline.main import run_main
from cmibam.pipeline import version

def parse_cl_args(in_args):
    """Parse input commandline arguments, returning keyword arguments for run_main.
    """
    description = "Build the tumor/normal BAM processing graph for an individual."
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("config_file", help="YAML configuration file with reference files and options")
    inputs = parser.add_mutually_exclusive_group(required=True)
    inputs.add_argument("-m", "--metadata",
                        help="Table with the necessary information about each lane to process")
    inputs.add_argument("-i", "--individual",
                        help="Individual to retrieve lane information for from the LIMS")
    parser.add_argument("--lims-url", help="Base URL of the LIMS API")
    parser.add_argument("--lims-key", help="API key for the LIMS")
    parser.add_argument("-o", "--out", dest="out_file",
                        help="Output YAML file with declared tasks. Defaults to <individual>-graph.yaml")
    parser.add_argument("-v", "--version", action="version",
                        version="%(prog)s " + version.__version__)
    args = parser.parse_args(in_args)
    if args.individual and not args.lims_url:
        parser.error("Retrieving an individual (-i) requires the LIMS URL (--lims-url)")
    kwargs = {"config_file": args.config_file,
              "out_file": args.out_file}
    if args.metadata:
        kwargs["metadata"] = args.metadata
    else:
        kwargs["individual"] = args.individual
        kwargs["lims"] = LimsApiAccess(args.lims_url, args.lims_key)
    return kwargs

def main(**kwargs):
    run_main(**kwargs)

if __name__ == "__main__":
    main(**parse_cl_args(sys.argv[1:]))
