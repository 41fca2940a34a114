"""
functions to access the configuration dictionary in a clearer way
"""
import multiprocessing

import toolz as tz

LOOKUPS = {
    "sample_list": {"keys": ["sample_list"]},
    "out_dir": {"keys": ["out_dir"]},
    "sequence_handling": {"keys": ["sequence_handling"]},
    "forward_naming": {"keys": ["algorithm", "forward_naming"]},
    "reverse_naming": {"keys": ["algorithm", "reverse_naming"]},
    "singles_naming": {"keys": ["algorithm", "singles_naming"]},
    "quality_encoding": {"keys": ["algorithm", "quality_encoding"], "default": "sanger"},
    "quality_threshold": {"keys": ["algorithm", "quality_threshold"], "default": 20},
    "num_cores": {"keys": ["algorithm", "num_cores"]},
    "sample_timeout": {"keys": ["algorithm", "sample_timeout"]},
    "fail_on_empty": {"keys": ["algorithm", "fail_on_empty"], "default": False},
    "heterozygosity": {"keys": ["algorithm", "heterozygosity"], "default": 0.001},
    "ploidy": {"keys": ["algorithm", "ploidy"], "default": 2},
    "ref_file": {"keys": ["reference", "fasta"]},
    "ref_dict": {"keys": ["reference", "dict"]},
}

def get_cores(config):
    """Number of concurrent samples, defaulting to the machine's cores.
    """
    cores = tz.get_in(LOOKUPS["num_cores"]["keys"], config)
    return int(cores) if cores else multiprocessing.cpu_count()

def get_sample_timeout(config):
    timeout = tz.get_in(LOOKUPS["sample_timeout"]["keys"], config)
    return float(timeout) if timeout else None

def getter(keys, global_default=None):
    def lookup(config, default=None):
        default = global_default if default is None else default
        return tz.get_in(keys, config, default)
    return lookup

"""
generate the getter functions but don't override any explicitly
defined
"""
_g = globals()
for k, v in LOOKUPS.items():
    keys = v['keys']
    getter_fn = 'get_' + k
    if getter_fn not in _g:
        _g["get_" + k] = getter(keys, v.get('default', None))
