"""Manipulation functionality to deal with reference files.
"""
import collections
import os

from seqhand.errors import ConfigurationError, ShardIndexError

RegionShard = collections.namedtuple("RegionShard", "index name")

def dict_contigs(dict_file):
    """Ordered sequence names from the @SQ records of a sequence dictionary.
    """
    if not os.path.isfile(dict_file):
        raise ConfigurationError("Reference dictionary not found: %s" % dict_file)
    out = []
    with open(dict_file) as in_handle:
        for line in (l for l in in_handle if l.startswith("@SQ")):
            names = [x[3:] for x in line.rstrip("\r\n").split("\t")[1:] if x.startswith("SN:")]
            if not names or not names[0]:
                raise ConfigurationError("Malformed @SQ record without a sequence name in %s: %s"
                                         % (dict_file, line.strip()))
            out.append(names[0])
    if not out:
        raise ConfigurationError("No sequence records found in reference dictionary %s" % dict_file)
    return out

def resolve_region(dict_file, shard_index):
    """Map a zero-based shard index to a sequence from the dictionary.
    """
    contigs = dict_contigs(dict_file)
    shard_index = int(shard_index)
    if shard_index < 0 or shard_index >= len(contigs):
        raise ShardIndexError(shard_index, len(contigs), dict_file)
    return RegionShard(shard_index, contigs[shard_index])
