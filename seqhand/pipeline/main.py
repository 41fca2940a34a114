"""Main entry points for running sequence_handling handlers.

Sets up logging from the configuration and runs one handler, either
Quality_Trimming over all samples or Genotype_GVCFs over a single shard.
"""
import os

from seqhand import log
from seqhand.distributed import multi
from seqhand.errors import ConfigurationError
from seqhand.pipeline import config_utils
from seqhand.pipeline import datadict as dd
from seqhand.pipeline import quality_trimming
from seqhand.variation import genotype_gvcfs

def _setup_logging(config, parallel):
    parallel, controller = log.create_base_logger(config, parallel)
    return log.setup_local_logging(config, parallel), controller, parallel

def _teardown_logging(handler, controller):
    handler.pop_thread()
    if hasattr(handler, "close"):
        handler.close()
    log.stop_base_logger(controller)

def _required(config, getter, name):
    val = getter(config)
    if not val:
        raise ConfigurationError("Configuration is missing required setting: %s" % name)
    return val

def run_quality_trimming(config_file, numcores=None):
    """Trim all samples from the configured sample list, returning the summary.
    """
    config = config_utils.load_config(config_file)
    config = config_utils.update_algorithm(config, num_cores=numcores)
    parallel = multi.get_parallel(config)
    handler, controller, parallel = _setup_logging(config, parallel)
    try:
        return quality_trimming.run_quality_trimming(_required(config, dd.get_sample_list, "sample_list"),
                                                     _required(config, dd.get_out_dir, "out_dir"),
                                                     config, parallel)
    finally:
        _teardown_logging(handler, controller)

def run_genotype_gvcfs(config_file, shard_index):
    """Genotype one shard, returning the output VCF.
    """
    config = config_utils.load_config(config_file)
    handler, controller, _ = _setup_logging(config, {"cores": 1})
    try:
        return genotype_gvcfs.genotype_gvcfs(_required(config, dd.get_sample_list, "sample_list"),
                                             _required(config, dd.get_out_dir, "out_dir"),
                                             _required(config, dd.get_ref_dict, "reference dict"),
                                             shard_index, config)
    finally:
        _teardown_logging(handler, controller)

def shard_index_from_env(environ=None):
    """Default shard index from PBS or SLURM array job variables.
    """
    environ = os.environ if environ is None else environ
    for key in ["PBS_ARRAYID", "SLURM_ARRAY_TASK_ID"]:
        if environ.get(key):
            return int(environ[key])
    return None
