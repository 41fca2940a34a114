"""Stream possibly compressed fastq files to consumers through named pipes.

Compressed inputs are decompressed on the fly by a background producer that
also feeds seqqs, so raw statistics are collected in the same pass and no
decompressed copy is written to disk. Consumers such as sickle read the
named pipe as if it were a plain fastq file.
"""
import os
import subprocess

from seqhand import utils
from seqhand.errors import ExternalToolError
from seqhand.log import logger
from seqhand.provenance import do
from seqhand.qc import seqqs


def pipe_path(out_dir, name, direction):
    return os.path.join(out_dir, "%s_%s_PIPE" % (name, direction))


class StreamHandle:
    """A readable fastq path, optionally backed by a producer and named pipe.
    """
    def __init__(self, path, name, direction, producer=None):
        self.path = path
        self.name = name
        self.direction = direction
        self.producer = producer

    @property
    def is_pipe(self):
        return self.producer is not None

    def finish(self, timeout=None):
        """Wait for the producer, raising if it did not exit cleanly.
        """
        if self.producer is None:
            return 0
        cmd = self.producer.args
        try:
            exitcode = self.producer.wait(timeout)
        except subprocess.TimeoutExpired as e:
            output = do.background_output(self.producer)
            self.close()
            raise ExternalToolError(-1, cmd, output, timed_out=True) from e
        if exitcode != 0:
            output = do.background_output(self.producer)
            raise ExternalToolError(exitcode, cmd, output)
        return exitcode

    def close(self):
        """Terminate a running producer and remove the named pipe.
        """
        if self.producer is not None:
            if self.producer.poll() is None:
                logger.warning("Stopping stream producer for %s %s" % (self.name, self.direction))
            do.kill_background(self.producer)
            if utils.is_fifo(self.path):
                utils.remove_safe(self.path)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def __repr__(self):
        return "StreamHandle(%r, %r, %r, pipe=%s)" % (self.path, self.name, self.direction, self.is_pipe)


def open_stream(sample, out_dir, stats_dir, encoding, config, timeout=None):
    """Prepare the raw fastq file of a classified `Sample` for trimming, collecting raw statistics.

    Uncompressed files are summarized in place and returned directly.
    Compressed files get a fresh named pipe fed by a background producer;
    this returns immediately and the producer blocks until the pipe is read.
    """
    in_file, name, direction = sample.path, sample.name, sample.direction
    prefix = seqqs.stats_prefix(stats_dir, "raw", name, direction)
    if sample.compression == "none":
        seqqs.collect(in_file, prefix, encoding, config, sample=name, timeout=timeout)
        return StreamHandle(in_file, name, direction)
    fifo = pipe_path(out_dir, name, direction)
    utils.remove_safe(fifo)
    os.mkfifo(fifo)
    cmd = seqqs.stream_cl(in_file, sample.compression, prefix, encoding, fifo, config)
    try:
        producer = do.run_background(cmd, "Streaming %s reads through seqqs" % direction, name)
    except Exception:
        utils.remove_safe(fifo)
        raise
    return StreamHandle(fifo, name, direction, producer)


def cleanup_pipes(root):
    """Remove all named pipes below a directory.

    Only call once every producer and consumer under `root` has finished.
    """
    removed = []
    if not os.path.isdir(root):
        return removed
    for fifo in utils.find_fifos(root):
        try:
            os.remove(fifo)
        except FileNotFoundError:
            continue
        removed.append(fifo)
    if removed:
        logger.info("Removed %s leftover pipes under %s" % (len(removed), root))
    return removed
