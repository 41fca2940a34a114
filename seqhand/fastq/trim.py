"""Quality trimming of a single sample with sickle, with before and after statistics.

Steps:

  - stream raw reads through seqqs into sickle
  - collect statistics on the trimmed reads
  - repair quality scores and plot raw versus trimmed statistics
"""
import os
import time

from seqhand import utils
from seqhand.distributed.transaction import file_transaction
from seqhand.errors import SampleTaskError
from seqhand.fastq import stream
from seqhand.log import logger
from seqhand.pipeline import config_utils
from seqhand.pipeline import datadict as dd
from seqhand.provenance import do
from seqhand.qc import seqqs


def trim_paired(sample, out_root, threshold, encoding, helper_dir, config):
    """Trim a `PairedSample`, producing R1, R2 and singles outputs.
    """
    name = sample.name
    out_dir, stats_dir, plot_dir = _setup_dirs(out_root, name)
    out_files = {"forward": os.path.join(out_dir, "%s_R1_trimmed.fastq.gz" % name),
                 "reverse": os.path.join(out_dir, "%s_R2_trimmed.fastq.gz" % name),
                 "singles": os.path.join(out_dir, "%s_singles_trimmed.fastq.gz" % name)}
    deadline = _get_deadline(config)
    handles = []
    progress = ["raw statistics"]
    try:
        for in_sample in [sample.forward, sample.reverse]:
            handles.append(stream.open_stream(in_sample, out_dir, stats_dir,
                                              encoding, config, timeout=_remaining(deadline)))
        fwd_handle, rev_handle = handles
        progress.append("trimming")
        sickle = config_utils.get_program("sickle", config)
        with file_transaction(config, out_files["forward"], out_files["reverse"],
                              out_files["singles"]) as (tx_out1, tx_out2, tx_singles):
            cmd = [sickle, "pe", "-t", encoding, "-q", threshold, "--gzip-output",
                   "-f", fwd_handle.path, "-r", rev_handle.path,
                   "-o", tx_out1, "-p", tx_out2, "-s", tx_singles]
            do.run(cmd, "Quality trimming with sickle pe", name, timeout=_remaining(deadline))
            progress.append("decompression")
            for handle in handles:
                handle.finish(_remaining(deadline))
        _postprocess(progress, name, ["forward", "reverse"], out_files, stats_dir, plot_dir,
                     encoding, helper_dir, config, deadline)
    except Exception as e:
        raise SampleTaskError(name, progress[-1], e) from e
    finally:
        for handle in handles:
            handle.close()
    logger.info("Finished quality trimming of paired sample %s" % name)
    return out_files


def trim_single(sample, out_root, threshold, encoding, helper_dir, config):
    """Trim a single-end `Sample`.
    """
    name = sample.name
    out_dir, stats_dir, plot_dir = _setup_dirs(out_root, name)
    out_files = {"single": os.path.join(out_dir, "%s_single_trimmed.fastq.gz" % name)}
    deadline = _get_deadline(config)
    handle = None
    progress = ["raw statistics"]
    try:
        handle = stream.open_stream(sample, out_dir, stats_dir,
                                    encoding, config, timeout=_remaining(deadline))
        progress.append("trimming")
        sickle = config_utils.get_program("sickle", config)
        with file_transaction(config, out_files["single"]) as tx_out:
            cmd = [sickle, "se", "-t", encoding, "-q", threshold, "--gzip-output",
                   "-f", handle.path, "-o", tx_out]
            do.run(cmd, "Quality trimming with sickle se", name, timeout=_remaining(deadline))
            progress.append("decompression")
            handle.finish(_remaining(deadline))
        _postprocess(progress, name, ["single"], out_files, stats_dir, plot_dir,
                     encoding, helper_dir, config, deadline)
    except Exception as e:
        raise SampleTaskError(name, progress[-1], e) from e
    finally:
        if handle is not None:
            handle.close()
    logger.info("Finished quality trimming of single sample %s" % name)
    return out_files


def _postprocess(progress, name, directions, out_files, stats_dir, plot_dir, encoding, helper_dir,
                 config, deadline):
    """Trimmed statistics, quality score repair and plots for each direction.

    Appends each step name to `progress` before running it.
    """
    progress.append("trimmed statistics")
    for direction in directions:
        seqqs.collect_compressed(out_files[direction], "gzip",
                                 seqqs.stats_prefix(stats_dir, "trimmed", name, direction),
                                 encoding, config, sample=name, timeout=_remaining(deadline))
    progress.append("quality score repair")
    stats = {}
    for phase in ["raw", "trimmed"]:
        for direction in directions:
            stats[(phase, direction)] = seqqs.artifacts(stats_dir, phase, name, direction)
            seqqs.repair_quality(stats[(phase, direction)]["qual"], helper_dir,
                                 sample=name, timeout=_remaining(deadline))
    progress.append("plotting")
    for direction in directions:
        seqqs.plot(stats[("raw", direction)], stats[("trimmed", direction)], name, direction,
                   helper_dir, plot_dir, config, timeout=_remaining(deadline))


def _setup_dirs(out_root, name):
    out_dir = os.path.join(os.path.abspath(out_root), name)
    stats_dir = os.path.join(out_dir, "stats")
    plot_dir = utils.safe_makedir(os.path.join(stats_dir, "plots"))
    return out_dir, stats_dir, plot_dir


def _get_deadline(config):
    timeout = dd.get_sample_timeout(config)
    return time.monotonic() + timeout if timeout else None


def _remaining(deadline):
    if deadline is None:
        return None
    return max(0.0, deadline - time.monotonic())
