#!/usr/bin/env python -Es
"""Run a sequence_handling handler on a YAML configuration.

Usage:
  sequence_handling.py Quality_Trimming <config_file> [-n cores]
  sequence_handling.py Genotype_GVCFs <config_file> [--shard-index N]

Quality_Trimming trims every sample in the configured sample list in
parallel. Genotype_GVCFs genotypes one region of the reference; the region
is chosen by --shard-index, defaulting to the PBS_ARRAYID or
SLURM_ARRAY_TASK_ID array job variables.
"""
import argparse
import sys

from seqhand.errors import ConfigurationError, ExternalToolError, ShardIndexError
from seqhand.log import logger
from seqhand.pipeline import main as pipeline_main
from seqhand.pipeline import version

def parse_cl_args(in_args):
    description = "Quality trimming and sharded joint genotyping of sequencing samples."
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("-v", "--version", action="version", version=version.__version__)
    subparsers = parser.add_subparsers(dest="handler", help="Handler to run")
    subparsers.required = True
    qt = subparsers.add_parser("Quality_Trimming", help="Trim reads and plot quality statistics")
    qt.add_argument("config_file", help="YAML configuration file")
    qt.add_argument("-n", "--numcores", type=int, default=None,
                    help="Number of samples to trim concurrently (defaults to all cores)")
    gg = subparsers.add_parser("Genotype_GVCFs", help="Genotype gVCFs for one reference region")
    gg.add_argument("config_file", help="YAML configuration file")
    gg.add_argument("--shard-index", type=int, default=None,
                    help=("Zero-based index of the reference sequence to genotype. "
                          "Defaults to PBS_ARRAYID or SLURM_ARRAY_TASK_ID"))
    args = parser.parse_args(in_args)
    if args.handler == "Genotype_GVCFs" and args.shard_index is None:
        try:
            args.shard_index = pipeline_main.shard_index_from_env()
        except ValueError as e:
            parser.error("Array job index is not an integer: %s" % e)
        if args.shard_index is None:
            parser.error("Genotype_GVCFs requires --shard-index or an array job index "
                         "in PBS_ARRAYID or SLURM_ARRAY_TASK_ID")
    return args

def main(in_args):
    args = parse_cl_args(in_args)
    try:
        if args.handler == "Quality_Trimming":
            summary = pipeline_main.run_quality_trimming(args.config_file, args.numcores)
            return 0 if summary.ok else 1
        else:
            out_file = pipeline_main.run_genotype_gvcfs(args.config_file, args.shard_index)
            logger.info("Genotyped shard %s: %s" % (args.shard_index, out_file))
            return 0
    except (ConfigurationError, ShardIndexError, ExternalToolError) as e:
        sys.stderr.write("%s\n" % e)
        return 1

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
