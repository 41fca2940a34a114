"""Joint genotyping of per-sample gVCFs for one region of the reference.

Each invocation handles a single shard: the shard index selects one sequence
from the reference dictionary and GATK GenotypeGVCFs writes
`Genotype_GVCFs/<region>.vcf` for it. Spreading shards over an array job is
left to the scheduler.

Modified from the GATK_GenotypeGVCFs job script by Tom Kono:
https://github.com/MorrellLAB/Deleterious_GP/blob/master/Job_Scripts/Seq_Handling/GATK_GenotypeGVCFs.job
"""
import os
import re

from seqhand import broad, utils
from seqhand.bam import ref
from seqhand.distributed.transaction import file_transaction
from seqhand.errors import ConfigurationError
from seqhand.fastq.classify import read_sample_list
from seqhand.log import logger
from seqhand.pipeline import datadict as dd

OUT_NAME = "Genotype_GVCFs"
GVCF_PATTERN = re.compile(r"\.g\.vcf")

def gvcf_inputs(sample_list):
    """Retrieve per-sample gVCF files from a sample list.
    """
    gvcfs = [x for x in read_sample_list(sample_list) if GVCF_PATTERN.search(x)]
    if not gvcfs:
        raise ConfigurationError("No gVCF files (.g.vcf) found in sample list %s" % sample_list)
    return gvcfs

def genotype_gvcfs(sample_list, out_dir, dict_file, shard_index, config):
    """Genotype all gVCFs in the sample list over the region for shard_index.
    """
    region = ref.resolve_region(dict_file, shard_index)
    ref_file = dd.get_ref_file(config)
    if not ref_file or not os.path.isfile(ref_file):
        raise ConfigurationError("Reference sequence not found: %s" % ref_file)
    vrn_files = gvcf_inputs(sample_list)
    broad_runner = broad.runner_from_config(config)
    out_dir = utils.safe_makedir(os.path.join(os.path.abspath(out_dir), OUT_NAME))
    out_file = os.path.join(out_dir, "%s.vcf" % region.name)
    logger.info("Genotyping %s gVCFs over shard %s: %s" % (len(vrn_files), region.index, region.name))
    with file_transaction(config, out_file) as tx_out_file:
        params = ["-T", "GenotypeGVCFs",
                  "-R", ref_file,
                  "-L", region.name]
        for vrn_file in vrn_files:
            params += ["-V", vrn_file]
        params += ["--heterozygosity", dd.get_heterozygosity(config),
                   "--sample_ploidy", dd.get_ploidy(config),
                   "-o", tx_out_file]
        broad_runner.run_gatk(params, region=region.name, base_dir=out_dir)
    return out_file
