"""Work with Broad's Java libraries from Python.

  GATK -- Next-generation sequence processing.
"""
from seqhand.distributed.transaction import tx_tmpdir
from seqhand.errors import ConfigurationError
from seqhand.pipeline import config_utils
from seqhand.provenance import do

def get_default_jvm_opts(tmp_dir=None):
    """Retrieve default JVM tuning options

    Serial GC keeps concurrently running Java processes from each claiming
    all cores of a shared node.
    """
    opts = ["-XX:+UseSerialGC"]
    if tmp_dir:
        opts.append("-Djava.io.tmpdir=%s" % tmp_dir)
    return opts

class BroadRunner:
    """Simplify running Broad commandline tools.
    """
    def __init__(self, gatk_jar, java, config):
        resources = config_utils.get_resources("gatk", config)
        self._gatk_jar = gatk_jar
        self._java = java
        self._config = config
        self._memory = resources.get("memory")
        self._jvm_opts = resources.get("jvm_opts", ["-Xms750m", "-Xmx2g"])

    def jvm_opts(self, tmp_dir=None):
        """Memory options, with an explicit memory limit overriding jvm_opts.
        """
        if self._memory:
            opts = ["-Xmx%s" % self._memory]
        else:
            opts = list(self._jvm_opts)
        return opts + get_default_jvm_opts(tmp_dir)

    def cl_gatk(self, params, tmp_dir=None):
        return [self._java] + self.jvm_opts(tmp_dir) + ["-jar", self._gatk_jar] + [str(x) for x in params]

    def run_gatk(self, params, region=None, base_dir=None):
        """Top level interface to running a GATK command.

        Java temporary files go to a transactional directory below `base_dir`.
        """
        with tx_tmpdir(self._config, base_dir) as tmp_dir:
            prog = params[params.index("-T") + 1]
            do.run(self.cl_gatk(params, tmp_dir), "GATK: {0}".format(prog), region=region)

def runner_from_config(config):
    """Build a GATK runner from configured java and jar resources.
    """
    try:
        gatk_jar = config_utils.get_jar("gatk", config)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    try:
        java = config_utils.get_program("java", config)
    except config_utils.CmdNotFound as e:
        raise ConfigurationError("Missing required programs: java") from e
    return BroadRunner(gatk_jar, java, config)
