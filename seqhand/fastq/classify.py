"""Group raw read files into paired-end and single-end samples.

Files are assigned to a direction by searching their paths for the forward,
reverse and singles naming patterns. Sample names come from the file base
name with the naming suffix removed, and forward and reverse files sharing a
sample name form one paired sample.
"""
import collections
import os
import re

from seqhand.errors import ConfigurationError, CountMismatchError
from seqhand.log import logger

Sample = collections.namedtuple("Sample", "name direction path compression")
PairedSample = collections.namedtuple("PairedSample", "name forward reverse")
Classification = collections.namedtuple("Classification", "paired single error")

def compression_kind(path):
    """Infer compression from the final file extension.
    """
    ext = path.rsplit(".", 1)[-1] if "." in os.path.basename(path) else ""
    if ext == "gz":
        return "gzip"
    elif ext == "bz2":
        return "bzip2"
    else:
        return "none"

def read_sample_list(sample_list):
    """Read a newline-delimited list of input files.
    """
    if not os.path.isfile(sample_list):
        raise ConfigurationError("Sample list not found: %s" % sample_list)
    out = []
    with open(sample_list) as in_handle:
        for line in in_handle:
            line = line.strip()
            if line and not line.startswith("#"):
                out.append(line)
    return out

def find_matches(paths, naming):
    """Retrieve all paths containing a match to the naming pattern.
    """
    if not naming:
        return []
    pattern = re.compile(naming)
    return [x for x in paths if pattern.search(x)]

def sample_name(path, naming):
    """Derive a sample name by stripping the naming suffix from the base name.

    A literal suffix is removed as `basename` does, otherwise the last match of
    the naming regular expression is cut out of the base name.
    """
    base = os.path.basename(path)
    if base.endswith(naming) and base != naming:
        name = base[:-len(naming)]
    else:
        matches = [m for m in re.finditer(naming, base) if m.end() > m.start()]
        if matches:
            last = matches[-1]
            name = base[:last.start()] + base[last.end():]
        else:
            name = base
    if not name:
        raise ConfigurationError("Empty sample name derived from %s with naming %s" % (path, naming))
    return name

def _to_samples(paths, naming, direction):
    samples = [Sample(sample_name(x, naming), direction, x, compression_kind(x)) for x in paths]
    seen = collections.Counter(x.name for x in samples)
    dups = sorted(k for k, v in seen.items() if v > 1)
    if dups:
        raise ConfigurationError("Duplicate %s sample names: %s" % (direction, ", ".join(dups)))
    return samples

def pair_samples(forward, reverse):
    """Combine forward and reverse samples sharing a name.
    """
    if len(forward) != len(reverse):
        raise CountMismatchError(len(forward), len(reverse))
    by_name = {x.name: x for x in reverse}
    orphans = sorted(set(x.name for x in forward) ^ set(by_name))
    if orphans:
        raise ConfigurationError("Could not pair forward and reverse reads for samples: %s"
                                 % ", ".join(orphans))
    return [PairedSample(x.name, x, by_name[x.name]) for x in forward]

def classify(paths, forward_naming, reverse_naming, single_naming):
    """Partition input files into paired and single samples.

    A forward/reverse count mismatch does not prevent classification of
    single samples: it is returned as `error` with no paired samples.
    """
    forward = _to_samples(find_matches(paths, forward_naming), forward_naming, "forward")
    reverse = _to_samples(find_matches(paths, reverse_naming), reverse_naming, "reverse")
    single = _to_samples(find_matches(paths, single_naming), single_naming, "single")
    error = None
    try:
        paired = pair_samples(forward, reverse)
    except CountMismatchError as e:
        logger.error(str(e))
        paired, error = [], e
    logger.info("Found %s paired and %s single samples" % (len(paired), len(single)))
    return Classification(paired, single, error)
