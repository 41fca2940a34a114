"""Exceptions raised while classifying, trimming and genotyping samples.
"""
import subprocess


class ConfigurationError(Exception):
    """Inputs or configuration prevent a run from starting.
    """
    pass


class CountMismatchError(ConfigurationError):
    """Unequal numbers of forward and reverse read files.
    """
    def __init__(self, num_forward, num_reverse):
        self.num_forward = num_forward
        self.num_reverse = num_reverse
        super(CountMismatchError, self).__init__(
            "Unequal numbers of forward and reverse reads: %s forward, %s reverse"
            % (num_forward, num_reverse))


class ShardIndexError(IndexError):
    def __init__(self, index, num_regions, dict_file):
        self.index = index
        self.num_regions = num_regions
        super(ShardIndexError, self).__init__(
            "Shard index %s out of range: %s contains %s sequences (valid 0-%s)"
            % (index, dict_file, num_regions, num_regions - 1))


class SampleTaskError(Exception):
    """Failure inside the processing pipeline of a single sample.
    """
    def __init__(self, sample, step, cause):
        self.sample = sample
        self.step = step
        self.cause = cause
        super(SampleTaskError, self).__init__("%s failed during %s: %s" % (sample, step, cause))


class ExternalToolError(subprocess.CalledProcessError):
    """Non-zero exit or timeout of an external program.

    `output` holds the last lines the program wrote, for reporting.
    """
    def __init__(self, returncode, cmd, output=None, timed_out=False):
        super(ExternalToolError, self).__init__(returncode, cmd, output)
        self.timed_out = timed_out

    def __str__(self):
        if self.timed_out:
            msg = "Command timed out and was killed: %s" % self._cmd_str()
        else:
            msg = "Command returned non-zero exit status %s: %s" % (self.returncode, self._cmd_str())
        if self.output:
            msg += "\n" + self.output
        return msg

    def _cmd_str(self):
        if isinstance(self.cmd, (list, tuple)):
            return " ".join(str(x) for x in self.cmd)
        return str(self.cmd)
