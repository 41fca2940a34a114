"""Quality statistics with seqqs, quality score repair and plotting.

seqqs writes nucleotide composition, length distribution and quality
tables for a stream of fastq records under a common prefix:

  <prefix>_nucl.txt, <prefix>_len.txt, <prefix>_qual.txt

The quality table is rescaled by the fix_quality.sh helper into
`<prefix>_qual.txt_adj` before plotting with plot_seqqs.R.
"""
import os
import shlex

from seqhand import utils
from seqhand.pipeline import config_utils
from seqhand.provenance import do

SUFFIXES = {"forward": "R1", "reverse": "R2", "single": "single"}
DECOMPRESSORS = {"gzip": "gzip", "bzip2": "bzip2"}

def stats_prefix(stats_dir, phase, name, direction):
    """Output prefix for one (phase, sample, direction) set of statistics.
    """
    return os.path.join(stats_dir, "%s_%s_%s" % (phase, name, SUFFIXES[direction]))

def artifacts(stats_dir, phase, name, direction):
    prefix = stats_prefix(stats_dir, phase, name, direction)
    return {"nucl": prefix + "_nucl.txt",
            "len": prefix + "_len.txt",
            "qual": prefix + "_qual.txt",
            "qual_adj": prefix + "_qual.txt_adj"}

def decompress_cl(in_file, compression, config):
    decompressor = config_utils.get_program(DECOMPRESSORS[compression], config)
    return "%s -cd %s" % (shlex.quote(decompressor), shlex.quote(in_file))

def collect_cl(prefix, encoding, config, in_file="-", passthrough=False):
    seqqs = config_utils.get_program("seqqs", config)
    cmd = [seqqs, "-q", encoding]
    if passthrough:
        cmd.append("-e")
    cmd += ["-p", prefix, in_file]
    return " ".join(shlex.quote(str(x)) for x in cmd)

def collect(in_file, prefix, encoding, config, sample=None, timeout=None):
    """Run seqqs directly against an uncompressed fastq file.
    """
    do.run(collect_cl(prefix, encoding, config, in_file),
           "seqqs statistics for %s" % os.path.basename(in_file), sample, timeout=timeout)
    return prefix

def collect_compressed(in_file, compression, prefix, encoding, config, sample=None, timeout=None):
    """Decompress on the fly into seqqs.
    """
    cmd = "%s | %s" % (decompress_cl(in_file, compression, config),
                       collect_cl(prefix, encoding, config))
    do.run(cmd, "seqqs statistics for %s" % os.path.basename(in_file), sample, timeout=timeout)
    return prefix

def stream_cl(in_file, compression, prefix, encoding, out_file, config):
    """Decompress, collect statistics and pass reads through to `out_file`.
    """
    return "%s | %s > %s" % (decompress_cl(in_file, compression, config),
                             collect_cl(prefix, encoding, config, passthrough=True),
                             shlex.quote(out_file))

def repair_quality(qual_file, helper_dir, sample=None, timeout=None):
    """Rescale quality scores with the fix_quality.sh helper.

    Not idempotent: call exactly once per quality table.
    """
    do.run([os.path.join(helper_dir, "fix_quality.sh"), qual_file],
           "Fix quality scores in %s" % os.path.basename(qual_file), sample, timeout=timeout)
    return qual_file + "_adj"

def plot(raw, trimmed, name, direction, helper_dir, plot_dir, config, timeout=None):
    """Plot raw versus trimmed statistics for one direction with plot_seqqs.R.
    """
    rscript = config_utils.get_program("rscript", config, default="Rscript")
    cmd = [rscript, os.path.join(helper_dir, "plot_seqqs.R"),
           raw["nucl"], raw["len"], raw["qual_adj"],
           trimmed["nucl"], trimmed["len"], trimmed["qual_adj"],
           name, direction]
    with utils.chdir(plot_dir):
        do.run(cmd, "Plot %s statistics" % direction, name, timeout=timeout)
    return plot_dir
