"""Loads configurations from .yaml files and expands environment variables.
"""
import copy
import os

import toolz as tz
import yaml


class CmdNotFound(Exception):
    pass

# ## Retrieval functions

def load_config(config_file):
    """Load YAML config file, replacing environmental variables.
    """
    with open(config_file) as in_handle:
        config = yaml.safe_load(in_handle) or {}
    config = _expand_paths(config)
    if "resources" not in config:
        config["resources"] = {}
    if "algorithm" not in config:
        config["algorithm"] = {}
    # lowercase resource names, the preferred way to specify, for back-compatibility
    newr = {}
    for k, v in config["resources"].items():
        if k.lower() != k:
            newr[k.lower()] = v
    config["resources"].update(newr)
    config["config_file"] = os.path.abspath(config_file)
    return config

def _expand_paths(config):
    for field, setting in config.items():
        if isinstance(config[field], dict):
            config[field] = _expand_paths(config[field])
        else:
            config[field] = expand_path(setting)
    return config

def expand_path(path):
    """ Combines os.path.expandvars with replacing ~ with $HOME.
    """
    try:
        return os.path.expandvars(path.replace("~", "$HOME"))
    except AttributeError:
        return path

def update_algorithm(config, **kwargs):
    """Return a copy of the configuration with updated algorithm settings.
    """
    config = copy.deepcopy(config)
    for key, val in kwargs.items():
        if val is not None:
            config = tz.assoc_in(config, ["algorithm", key], val)
    return config

def get_resources(name, config):
    """Retrieve resources for a program, pulling from multiple config sources.
    """
    return tz.get_in(["resources", name], config,
                     tz.get_in(["resources", "default"], config, {}))

def get_program(name, config, default=None):
    """Retrieve the command line of a program from the configuration.

    Programs are specified in the `resources` section, either as a plain
    string or as a dictionary with a `cmd` key, falling back to searching
    the PATH for `name`.
    """
    try:
        pconfig = config.get("resources", {})[name]
    except KeyError:
        pconfig = {}
    return _get_program_cmd(name, pconfig, config, default)

def _get_check_program_cmd(fn):
    def wrap(name, pconfig, config, default):
        is_ok = lambda f: os.path.isfile(f) and os.access(f, os.X_OK)
        program = expand_path(fn(name, pconfig, config, default))
        if is_ok(program):
            return program
        # search the PATH now
        for adir in os.environ.get("PATH", "").split(":"):
            if is_ok(os.path.join(adir, program)):
                return os.path.join(adir, program)
        raise CmdNotFound(" ".join(map(repr, (fn.__name__, name, pconfig, default))))
    return wrap

@_get_check_program_cmd
def _get_program_cmd(name, pconfig, config, default):
    """Retrieve commandline of a program.
    """
    if pconfig is None:
        return name
    elif isinstance(pconfig, str):
        return pconfig
    elif "cmd" in pconfig:
        return pconfig["cmd"]
    elif default is not None:
        return default
    else:
        return name

def _get_program_dir(name, config):
    """Retrieve directory for a program (local installs/java jars).
    """
    if config is None:
        raise ValueError("Could not find directory in config for %s" % name)
    elif isinstance(config, str):
        return config
    elif "dir" in config:
        return expand_path(config["dir"])
    else:
        raise ValueError("Could not find directory in config for %s" % name)

def get_jar(name, config):
    """Retrieve a java jar from the program resources.

    Accepts an explicit `jar` path or a `dir` holding a single matching jar.
    """
    resources = get_resources(name, config)
    if resources.get("jar"):
        jar = expand_path(resources["jar"])
        if not os.path.isfile(jar):
            raise ValueError("Could not find java jar for %s: %s" % (name, jar))
        return jar
    dname = _get_program_dir(name, resources)
    jars = sorted(x for x in os.listdir(dname) if x.endswith(".jar"))
    if len(jars) == 1:
        return os.path.join(dname, jars[0])
    elif len(jars) > 1:
        raise ValueError("Found multiple jars for %s in %s. Need single jar: %s" %
                         (name, dname, jars))
    else:
        raise ValueError("Could not find java jar %s in %s" % (name, dname))
