"""Quality trimming of all samples in a sample list, run in parallel.

Classifies the sample list into paired and single-end samples, validates the
configuration, trims each sample in its own worker process and removes any
named pipes left behind once all workers are finished.
"""
import collections
import numbers
import os

from seqhand.distributed import multi
from seqhand.errors import ConfigurationError
from seqhand.fastq import classify, stream, trim
from seqhand.log import logger
from seqhand.pipeline import config_utils
from seqhand.pipeline import datadict as dd

OUT_NAME = "Quality_Trimming"
DEPENDENCIES = ["sickle", "seqqs", "rscript", "gzip", "bash"]
SUPPORTED_ENCODINGS = ["sanger", "illumina", "solexa"]
PROGRAM_DEFAULTS = {"rscript": "Rscript"}

SampleResult = collections.namedtuple("SampleResult", "name kind ok error")


class TrimSummary:
    """Outcome of a quality trimming run, one result per dispatched sample.
    """
    def __init__(self, results):
        self.results = list(results)

    @property
    def succeeded(self):
        return [x.name for x in self.results if x.ok]

    @property
    def failed(self):
        return [(x.name, x.error) for x in self.results if not x.ok]

    @property
    def ok(self):
        return len(self.failed) == 0

    def __len__(self):
        return len(self.results)

    def report(self):
        logger.info("Quality trimming finished: %s succeeded, %s failed" %
                    (len(self.succeeded), len(self.failed)))
        for name, error in self.failed:
            logger.error("Sample %s failed: %s" % (name, error))


def get_helper_dir(config):
    """Retrieve the HelperScripts directory of the sequence_handling install.
    """
    seq_hand = dd.get_sequence_handling(config)
    helper_dir = os.path.join(seq_hand, "HelperScripts") if seq_hand else None
    if not helper_dir or not os.path.isdir(helper_dir):
        raise ConfigurationError("Cannot find directory with helper scripts: %s" % helper_dir)
    for script in ["fix_quality.sh", "plot_seqqs.R"]:
        if not os.path.isfile(os.path.join(helper_dir, script)):
            raise ConfigurationError("Missing helper script %s in %s" % (script, helper_dir))
    return os.path.abspath(helper_dir)

def check_dependencies(config, programs):
    """Ensure all external programs needed for a run are available.
    """
    missing = []
    for program in programs:
        try:
            config_utils.get_program(program, config, default=PROGRAM_DEFAULTS.get(program))
        except config_utils.CmdNotFound:
            missing.append(PROGRAM_DEFAULTS.get(program, program))
    if missing:
        raise ConfigurationError("Missing required programs: %s" % ", ".join(missing))

def _check_trim_params(config):
    threshold = dd.get_quality_threshold(config)
    if isinstance(threshold, bool) or not isinstance(threshold, numbers.Integral) or threshold < 0:
        raise ConfigurationError("Quality threshold must be a non-negative integer: %s" % threshold)
    encoding = dd.get_quality_encoding(config)
    if encoding not in SUPPORTED_ENCODINGS:
        raise ConfigurationError("Unsupported quality encoding %s. Supported encodings are %s"
                                 % (encoding, ", ".join(SUPPORTED_ENCODINGS)))
    return threshold, encoding

def _needed_decompressors(classification):
    kinds = set(x.compression for x in classification.single)
    for x in classification.paired:
        kinds.update([x.forward.compression, x.reverse.compression])
    return sorted(x for x in kinds if x not in ["none", "gzip"])

@multi.multiprocessing_aware_logging
def trim_paired_sample(sample, out_root, threshold, encoding, helper_dir, config, parallel):
    try:
        trim.trim_paired(sample, out_root, threshold, encoding, helper_dir, config)
    except Exception as e:
        logger.exception("Quality trimming failed for paired sample %s" % sample.name)
        return SampleResult(sample.name, "paired", False, str(e))
    return SampleResult(sample.name, "paired", True, None)

@multi.multiprocessing_aware_logging
def trim_single_sample(sample, out_root, threshold, encoding, helper_dir, config, parallel):
    try:
        trim.trim_single(sample, out_root, threshold, encoding, helper_dir, config)
    except Exception as e:
        logger.exception("Quality trimming failed for single sample %s" % sample.name)
        return SampleResult(sample.name, "single", False, str(e))
    return SampleResult(sample.name, "single", True, None)

def run_quality_trimming(sample_list, out_dir, config, parallel=None):
    """Trim all paired and single-end samples from a sample list.

    Configuration problems are raised before any sample is processed. A
    forward/reverse count mismatch skips all paired samples, still trims the
    single-end samples and is raised once those finish.
    """
    out_root = os.path.join(os.path.abspath(out_dir), OUT_NAME)
    threshold, encoding = _check_trim_params(config)
    helper_dir = get_helper_dir(config)
    classification = classify.classify(classify.read_sample_list(sample_list),
                                       dd.get_forward_naming(config),
                                       dd.get_reverse_naming(config),
                                       dd.get_singles_naming(config))
    num_samples = len(classification.paired) + len(classification.single)
    if num_samples == 0 and classification.error is None:
        msg = "No samples in %s match the forward, reverse or singles naming" % sample_list
        if dd.get_fail_on_empty(config):
            raise ConfigurationError(msg)
        logger.warning(msg)
        return TrimSummary([])
    check_dependencies(config, DEPENDENCIES + _needed_decompressors(classification))
    results = []
    try:
        results += multi.run_multicore(
            trim_paired_sample,
            [(x, out_root, threshold, encoding, helper_dir, config, parallel or {})
             for x in classification.paired],
            config, parallel)
        results += multi.run_multicore(
            trim_single_sample,
            [(x, out_root, threshold, encoding, helper_dir, config, parallel or {})
             for x in classification.single],
            config, parallel)
    finally:
        stream.cleanup_pipes(out_root)
    summary = TrimSummary(results)
    summary.report()
    if classification.error is not None:
        raise classification.error
    return summary
